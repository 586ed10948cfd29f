"""Domain models for the quiz portal."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    """Role attached to a caller identity under role-based authorization."""

    GUEST = "guest"
    USER = "user"
    ADMIN = "admin"


@dataclass(slots=True, frozen=True)
class Question:
    """Multiple-choice question with at least two options."""

    id: str
    text: str
    options: tuple[str, ...]
    correct_answer_index: int


@dataclass(slots=True, frozen=True)
class QuestionDraft:
    """Question as submitted by an instructor, before validation."""

    text: str
    options: list[str]
    correct_answer_index: int
    id: str | None = None


@dataclass(slots=True, frozen=True)
class Quiz:
    """Authored quiz. Replaced wholesale on update, never edited in place."""

    id: str
    title: str
    author: str
    questions: tuple[Question, ...]
    description: str | None = None
    published: bool = False

    def find_question(self, question_id: str) -> Question | None:
        return next((q for q in self.questions if q.id == question_id), None)


@dataclass(slots=True, frozen=True)
class Student:
    """Student identity derived from free-text name and course."""

    id: str
    name: str
    course: str


@dataclass(slots=True, frozen=True)
class Answer:
    """Graded answer. The correct index is a snapshot taken at submission time."""

    question_id: str
    selected_option_index: int
    correct_answer_index: int
    is_correct: bool


@dataclass(slots=True, frozen=True)
class StudentAttempt:
    """The single recorded pass of one student through one quiz."""

    student_id: str
    student_name: str
    course: str
    quiz_id: str
    answers: tuple[Answer, ...]
    score: int
    timestamp: datetime


@dataclass(slots=True, frozen=True)
class SubmissionResult:
    """Outcome of a submission. ``is_retake`` means the stored attempt was returned."""

    attempt: StudentAttempt
    is_retake: bool

    @property
    def answers(self) -> tuple[Answer, ...]:
        return self.attempt.answers

    @property
    def score(self) -> int:
        return self.attempt.score


@dataclass(slots=True, frozen=True)
class ActionResult:
    """Structured success/failure value for operations that report inline feedback."""

    success: bool
    message: str


@dataclass(slots=True)
class QuestionStats:
    """Aggregate of the answers recorded for one question."""

    question_id: str
    answers: list[Answer] = field(default_factory=list)
    option_counts: list[int] = field(default_factory=list)
    correct_count: int = 0

    @property
    def total_answers(self) -> int:
        return len(self.answers)

    @property
    def correct_percentage(self) -> float:
        if not self.answers:
            return 0.0
        return (self.correct_count / len(self.answers)) * 100


@dataclass(slots=True)
class QuizResultStats:
    """Attempts for a quiz plus the per-question answer aggregate."""

    quiz_id: str
    attempts: list[StudentAttempt]
    questions: list[QuestionStats]
