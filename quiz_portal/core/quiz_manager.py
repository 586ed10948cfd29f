"""Business logic shared by the API server: quizzes, attempts and the authorization gate."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
import logging
from typing import TypeVar

from quiz_portal.core.errors import NotFoundError, UnsupportedOperationError
from quiz_portal.core.identity import resolve_student, resolve_student_id
from quiz_portal.core.models import (
    ActionResult,
    Answer,
    QuestionDraft,
    Quiz,
    QuizResultStats,
    Student,
    StudentAttempt,
    SubmissionResult,
    UserRole,
)
from quiz_portal.core.quiz_exporter import serialize_quiz
from quiz_portal.core.quiz_importer import DEFAULT_IMPORT_TITLE, ImportedQuiz, parse_quiz_text
from quiz_portal.core.services.attempt_ledger import AttemptLedger
from quiz_portal.core.services.authorization import (
    AuthorizationStrategy,
    Credential,
    Decision,
    Operation,
    RoleBasedStrategy,
    SharedSecretStrategy,
)
from quiz_portal.core.services.quiz_repository import QUIZ_NOT_FOUND_MESSAGE, QuizRepository
from quiz_portal.core.services.results import build_result_stats
from quiz_portal.core.services.scoring import SubmittedPair, grade_answers, score_answers
from quiz_portal.core.settings import Settings

logger = logging.getLogger(__name__)

_StrategyT = TypeVar("_StrategyT", bound=AuthorizationStrategy)


class QuizManager:
    """Facade for quiz services: Repository, Ledger and the authorization gate.

    Every instructor-only method takes the caller's :class:`Credential` and
    passes it through the gate before touching any stored state.
    """

    def __init__(
        self,
        gate: AuthorizationStrategy,
        repository: QuizRepository | None = None,
        ledger: AttemptLedger | None = None,
    ) -> None:
        self._gate = gate
        self._repository = repository or QuizRepository()
        self._ledger = ledger or AttemptLedger()

    @classmethod
    def from_settings(cls, settings: Settings) -> "QuizManager":
        gate: AuthorizationStrategy
        if settings.auth_mode == "role":
            gate = RoleBasedStrategy(settings.admin_identity_list())
        else:
            gate = SharedSecretStrategy(settings.teacher_password)
        return cls(gate)

    @property
    def auth_mode(self) -> str:
        return self._gate.mode

    # --- Student side ---

    def resolve_student(self, name: str, course: str) -> Student:
        return resolve_student(name, course)

    def get_published_quizzes(self) -> list[Quiz]:
        return self._repository.get_published()

    def get_quiz(self, quiz_id: str) -> Quiz:
        return self._repository.get_by_id(quiz_id)

    def has_attempted(self, student_id: str, quiz_id: str) -> bool:
        return self._ledger.has_attempted(student_id, quiz_id)

    def submit_attempt(
        self,
        student_name: str,
        course: str,
        quiz_id: str,
        answers: Sequence[SubmittedPair],
    ) -> SubmissionResult:
        student = resolve_student(student_name, course)
        quiz = self._repository.get_by_id(quiz_id)
        if not quiz.published:
            raise NotFoundError(QUIZ_NOT_FOUND_MESSAGE)

        def build_attempt() -> StudentAttempt:
            graded = grade_answers(quiz, answers)
            return StudentAttempt(
                student_id=student.id,
                student_name=student.name,
                course=student.course,
                quiz_id=quiz.id,
                answers=graded,
                score=score_answers(graded),
                timestamp=datetime.now(timezone.utc),
            )

        attempt, created = self._ledger.record_if_absent(student.id, quiz.id, build_attempt)
        if created:
            logger.info(
                "Recorded attempt for %s on quiz %s: %d/%d",
                student.id,
                quiz.id,
                attempt.score,
                len(attempt.answers),
            )
        else:
            logger.info("Repeated submission for %s on quiz %s; kept stored attempt", student.id, quiz.id)
        return SubmissionResult(attempt=attempt, is_retake=not created)

    # --- Instructor side ---

    def create_quiz(
        self,
        credential: Credential,
        title: str,
        description: str | None,
        questions: list[QuestionDraft],
    ) -> str:
        decision = self._authorize(Operation.CREATE_QUIZ, credential)
        quiz = self._repository.create(decision.principal, title, description, questions)
        logger.info("Quiz %s created by %s with %d questions", quiz.id, quiz.author, len(quiz.questions))
        return quiz.id

    def update_quiz(
        self,
        credential: Credential,
        quiz_id: str,
        title: str,
        description: str | None,
        questions: list[QuestionDraft],
    ) -> ActionResult:
        decision = self._authorize(Operation.UPDATE_QUIZ, credential)
        self._require_managed_quiz(decision, quiz_id)
        self._repository.update(quiz_id, title, description, questions)
        logger.info("Quiz %s updated", quiz_id)
        return ActionResult(success=True, message="Quiz updated successfully.")

    def publish_quiz(self, credential: Credential, quiz_id: str) -> ActionResult:
        decision = self._authorize(Operation.PUBLISH_QUIZ, credential)
        self._require_managed_quiz(decision, quiz_id)
        if not self._repository.publish(quiz_id):
            return ActionResult(success=True, message="Quiz is already published.")
        logger.info("Quiz %s published", quiz_id)
        return ActionResult(success=True, message="Quiz published successfully.")

    def import_quiz(self, credential: Credential, text: str, default_title: str = DEFAULT_IMPORT_TITLE) -> str:
        self._authorize(Operation.IMPORT_QUIZ, credential)
        imported = parse_quiz_text(text, default_title=default_title)
        return self.create_imported_quiz(credential, imported)

    def create_imported_quiz(self, credential: Credential, imported: ImportedQuiz) -> str:
        return self.create_quiz(credential, imported.title, imported.description, imported.questions)

    def export_quiz(self, credential: Credential, quiz_id: str) -> str:
        decision = self._authorize(Operation.EXPORT_QUIZ, credential)
        return serialize_quiz(self._require_managed_quiz(decision, quiz_id))

    def list_own_quizzes(self, credential: Credential) -> list[Quiz]:
        decision = self._authorize(Operation.LIST_OWN_QUIZZES, credential)
        return self._repository.get_by_author(decision.principal)

    def list_all_quizzes(self, credential: Credential) -> list[Quiz]:
        self._authorize(Operation.LIST_ALL_QUIZZES, credential)
        return self._repository.get_all()

    def list_attempts(self, credential: Credential, quiz_id: str) -> list[StudentAttempt]:
        decision = self._authorize(Operation.LIST_ATTEMPTS, credential)
        self._require_managed_quiz(decision, quiz_id)
        return self._ledger.attempts_for_quiz(quiz_id)

    def list_answers_by_student(
        self, credential: Credential, quiz_id: str
    ) -> list[tuple[str, tuple[Answer, ...]]]:
        return [
            (attempt.student_id, attempt.answers)
            for attempt in self.list_attempts(credential, quiz_id)
        ]

    def list_all_attempts(self, credential: Credential) -> list[StudentAttempt]:
        self._authorize(Operation.LIST_ALL_ATTEMPTS, credential)
        return self._ledger.all_attempts()

    def list_attempts_for_student(
        self, credential: Credential, name: str, course: str
    ) -> list[StudentAttempt]:
        decision = self._authorize(Operation.LIST_ATTEMPTS, credential)
        student_id = resolve_student_id(name, course)
        attempts = self._ledger.attempts_for_student(student_id)
        if decision.is_admin:
            return attempts
        own_quiz_ids = {quiz.id for quiz in self._repository.get_by_author(decision.principal)}
        return [attempt for attempt in attempts if attempt.quiz_id in own_quiz_ids]

    def get_result_stats(self, credential: Credential, quiz_id: str) -> QuizResultStats:
        decision = self._authorize(Operation.VIEW_RESULTS, credential)
        quiz = self._require_managed_quiz(decision, quiz_id)
        return build_result_stats(quiz, self._ledger.attempts_for_quiz(quiz_id))

    # --- Shared-secret strategy ---

    def verify_secret(self, secret: str) -> bool:
        return self._strategy(SharedSecretStrategy).verify(secret)

    def change_secret(self, credential: Credential, old_secret: str, new_secret: str) -> ActionResult:
        strategy = self._strategy(SharedSecretStrategy)
        self._authorize(Operation.CHANGE_SECRET, credential)
        result = strategy.change_secret(old_secret, new_secret)
        if result.success:
            logger.info("Teacher password rotated")
        return result

    # --- Role-based strategy ---

    def get_role(self, credential: Credential) -> UserRole:
        return self._strategy(RoleBasedStrategy).role_of(credential.identity)

    def is_caller_admin(self, credential: Credential) -> bool:
        return self._strategy(RoleBasedStrategy).is_admin(credential.identity)

    def register(self, credential: Credential) -> UserRole:
        role = self._strategy(RoleBasedStrategy).register(credential.identity)
        logger.info("Identity %s registered with role %s", credential.identity, role.value)
        return role

    def assign_role(self, credential: Credential, identity: str, role: UserRole) -> None:
        strategy = self._strategy(RoleBasedStrategy)
        self._authorize(Operation.ASSIGN_ROLE, credential)
        strategy.assign_role(identity, role)
        logger.info("Role %s assigned to %s by %s", role.value, identity, credential.identity)

    # --- Helpers ---

    def _authorize(self, operation: Operation, credential: Credential) -> Decision:
        decision = self._gate.authorize(operation, credential)
        if not decision.allowed:
            logger.warning("Denied %s: %s", operation.value, decision.reason)
        return decision.require()

    def _require_managed_quiz(self, decision: Decision, quiz_id: str) -> Quiz:
        quiz = self._repository.get_by_id(quiz_id)
        if not self._gate.can_manage(decision, quiz):
            logger.warning("Denied access to quiz %s for %s", quiz_id, decision.principal)
            raise NotFoundError(QUIZ_NOT_FOUND_MESSAGE)
        return quiz

    def _strategy(self, strategy_type: type[_StrategyT]) -> _StrategyT:
        if not isinstance(self._gate, strategy_type):
            raise UnsupportedOperationError(
                f"Operation is not available with '{self._gate.mode}' authorization."
            )
        return self._gate
