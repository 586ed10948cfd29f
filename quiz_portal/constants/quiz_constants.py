"""Quiz-related constants shared across the core and server layers."""

STUDENT_ID_SEPARATOR: str = "__"
MIN_OPTION_COUNT: int = 2
DEFAULT_TEACHER_PASSWORD: str = "changeme"
# Every holder of the shared secret authors quizzes under this name.
SHARED_AUTHOR: str = "teacher"
