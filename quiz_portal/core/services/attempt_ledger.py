"""Service storing at most one attempt per (student, quiz) key."""

from __future__ import annotations

from collections.abc import Callable
from threading import Lock

from quiz_portal.core.errors import ConflictError
from quiz_portal.core.models import StudentAttempt

AttemptKey = tuple[str, str]


class AttemptLedger:
    """Append-only record of student attempts.

    All reads and the check-and-insert share one lock, so two concurrent
    first submissions for the same key can never both be stored.
    """

    def __init__(self) -> None:
        self._attempts: dict[AttemptKey, StudentAttempt] = {}
        self._lock = Lock()

    def has_attempted(self, student_id: str, quiz_id: str) -> bool:
        with self._lock:
            return (student_id, quiz_id) in self._attempts

    def get(self, student_id: str, quiz_id: str) -> StudentAttempt | None:
        with self._lock:
            return self._attempts.get((student_id, quiz_id))

    def insert(self, attempt: StudentAttempt) -> None:
        """Store a new attempt, refusing a second row for the same key."""
        key = (attempt.student_id, attempt.quiz_id)
        with self._lock:
            if key in self._attempts:
                raise ConflictError("An attempt for this student and quiz already exists.")
            self._attempts[key] = attempt

    def record_if_absent(
        self,
        student_id: str,
        quiz_id: str,
        build_attempt: Callable[[], StudentAttempt],
    ) -> tuple[StudentAttempt, bool]:
        """Return ``(attempt, created)``.

        ``build_attempt`` runs under the ledger lock and only when no attempt
        exists yet; any exception it raises leaves the ledger untouched.
        """
        key = (student_id, quiz_id)
        with self._lock:
            existing = self._attempts.get(key)
            if existing is not None:
                return existing, False
            attempt = build_attempt()
            self._attempts[key] = attempt
            return attempt, True

    def attempts_for_quiz(self, quiz_id: str) -> list[StudentAttempt]:
        with self._lock:
            return [a for a in self._attempts.values() if a.quiz_id == quiz_id]

    def attempts_for_student(self, student_id: str) -> list[StudentAttempt]:
        with self._lock:
            return [a for a in self._attempts.values() if a.student_id == student_id]

    def all_attempts(self) -> list[StudentAttempt]:
        with self._lock:
            return list(self._attempts.values())

    def count(self) -> int:
        with self._lock:
            return len(self._attempts)
