"""Static metadata describing QuizPortal."""

APP_NAME = "QuizPortal"
APP_VERSION = "0.1"
APP_ABOUT_TEXT = (
    "QuizPortal lets an instructor author multiple-choice quizzes and lets students "
    "take each published quiz exactly once, with automatic scoring."
)
