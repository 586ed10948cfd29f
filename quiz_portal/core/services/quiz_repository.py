"""Service for storing quizzes and enforcing their content rules."""

from __future__ import annotations

from dataclasses import replace
from threading import Lock
from uuid import uuid4

from quiz_portal.constants.quiz_constants import MIN_OPTION_COUNT
from quiz_portal.core.errors import InvalidInputError, NotFoundError
from quiz_portal.core.models import Question, QuestionDraft, Quiz

QUIZ_NOT_FOUND_MESSAGE = "Quiz not found."


class QuizRepository:
    """Holds every quiz keyed by id. Stored quizzes are immutable snapshots."""

    def __init__(self) -> None:
        self._quizzes: dict[str, Quiz] = {}
        self._lock = Lock()

    def create(
        self,
        author: str,
        title: str,
        description: str | None,
        questions: list[QuestionDraft],
    ) -> Quiz:
        """Validate and store a new draft quiz."""
        quiz = Quiz(
            id=uuid4().hex,
            title=self._validate_title(title),
            description=self._normalize_description(description),
            author=author,
            questions=self._prepare_questions(questions),
            published=False,
        )
        with self._lock:
            self._quizzes[quiz.id] = quiz
        return quiz

    def update(
        self,
        quiz_id: str,
        title: str,
        description: str | None,
        questions: list[QuestionDraft],
    ) -> Quiz:
        """Replace title, description and the whole question set of a quiz."""
        cleaned_title = self._validate_title(title)
        cleaned_description = self._normalize_description(description)
        prepared = self._prepare_questions(questions)
        with self._lock:
            existing = self._require(quiz_id)
            updated = replace(
                existing,
                title=cleaned_title,
                description=cleaned_description,
                questions=prepared,
            )
            self._quizzes[quiz_id] = updated
        return updated

    def publish(self, quiz_id: str) -> bool:
        """Mark a quiz as published. Returns False if it already was."""
        with self._lock:
            existing = self._require(quiz_id)
            if existing.published:
                return False
            self._quizzes[quiz_id] = replace(existing, published=True)
            return True

    def get_by_id(self, quiz_id: str) -> Quiz:
        with self._lock:
            return self._require(quiz_id)

    def get_published(self) -> list[Quiz]:
        with self._lock:
            return [quiz for quiz in self._quizzes.values() if quiz.published]

    def get_by_author(self, author: str) -> list[Quiz]:
        with self._lock:
            return [quiz for quiz in self._quizzes.values() if quiz.author == author]

    def get_all(self) -> list[Quiz]:
        with self._lock:
            return list(self._quizzes.values())

    def _require(self, quiz_id: str) -> Quiz:
        quiz = self._quizzes.get(quiz_id)
        if quiz is None:
            raise NotFoundError(QUIZ_NOT_FOUND_MESSAGE)
        return quiz

    def _prepare_questions(self, drafts: list[QuestionDraft]) -> tuple[Question, ...]:
        if not drafts:
            raise InvalidInputError("Add at least one question.")

        explicit_ids = [(draft.id or "").strip() for draft in drafts]
        seen_ids: set[str] = set()
        for explicit_id in explicit_ids:
            if not explicit_id:
                continue
            if explicit_id in seen_ids:
                raise InvalidInputError(f"Duplicate question id '{explicit_id}'.")
            seen_ids.add(explicit_id)

        prepared: list[Question] = []
        for position, (draft, explicit_id) in enumerate(zip(drafts, explicit_ids), start=1):
            question_id = explicit_id or self._fallback_id(position, seen_ids)
            seen_ids.add(question_id)
            prepared.append(self._prepare_question(position, question_id, draft))
        return tuple(prepared)

    @staticmethod
    def _fallback_id(position: int, taken: set[str]) -> str:
        candidate = f"q{position}"
        suffix = 2
        while candidate in taken:
            candidate = f"q{position}_{suffix}"
            suffix += 1
        return candidate

    def _prepare_question(self, position: int, question_id: str, draft: QuestionDraft) -> Question:
        """Validate and normalize a question before storage."""
        cleaned_text = draft.text.strip()
        if not cleaned_text:
            raise InvalidInputError(f"Question {position} text is required.")

        options = self._validate_options(position, draft.options)
        index = draft.correct_answer_index
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(options):
            raise InvalidInputError(
                f"Question {position} correct answer index must be between 0 and {len(options) - 1}."
            )

        return Question(
            id=question_id,
            text=cleaned_text,
            options=options,
            correct_answer_index=index,
        )

    @staticmethod
    def _validate_options(position: int, options: list[str]) -> tuple[str, ...]:
        if len(options) < MIN_OPTION_COUNT:
            raise InvalidInputError(
                f"Question {position} needs at least {MIN_OPTION_COUNT} options."
            )
        cleaned = tuple(option.strip() for option in options)
        if any(not option for option in cleaned):
            raise InvalidInputError(f"Question {position} option text cannot be empty.")
        return cleaned

    @staticmethod
    def _validate_title(title: str) -> str:
        cleaned = title.strip()
        if not cleaned:
            raise InvalidInputError("Quiz title is required.")
        return cleaned

    @staticmethod
    def _normalize_description(description: str | None) -> str | None:
        if description is None:
            return None
        return description.strip() or None
