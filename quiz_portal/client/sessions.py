"""Caller-side session state for teachers and students.

Sessions only cache what the caller typed in. The server re-validates the
credential on every privileged call, so a stale cache simply fails with
:class:`UnauthorizedError`.
"""

from __future__ import annotations

from typing import Any

from quiz_portal.client.api_client import ApiClient
from quiz_portal.core.errors import UnauthorizedError
from quiz_portal.core.services.authorization import Credential


class TeacherSession:
    """Holds the teacher's password or identity for the length of a local session."""

    def __init__(self, api: ApiClient, identity: str | None = None) -> None:
        self._api = api
        self._identity = identity
        self._password: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self._password is not None or self._identity is not None

    @property
    def credential(self) -> Credential:
        if not self.is_authenticated:
            raise UnauthorizedError("Sign in to continue.")
        return Credential(identity=self._identity, secret=self._password)

    def login(self, password: str) -> bool:
        """Cache ``password`` only if the server accepts it."""
        if not self._api.verify_secret(password):
            return False
        self._password = password
        return True

    def sign_in(self, identity: str) -> str:
        """Use ``identity`` for role-based calls and return its current role."""
        self._identity = identity
        return self._api.get_role(self.credential)["role"]

    def register(self) -> str:
        return self._api.register(self.credential)

    def logout(self) -> None:
        self._password = None
        self._identity = None

    def change_password(self, old_password: str, new_password: str) -> dict[str, Any]:
        result = self._api.change_secret(self.credential, old_password, new_password)
        if result["success"]:
            self._password = new_password
        return result

    def create_quiz(self, title: str, description: str | None, questions: list[dict[str, Any]]) -> str:
        return self._api.create_quiz(self.credential, title, description, questions)

    def update_quiz(
        self,
        quiz_id: str,
        title: str,
        description: str | None,
        questions: list[dict[str, Any]],
    ) -> dict[str, Any]:
        return self._api.update_quiz(self.credential, quiz_id, title, description, questions)

    def publish_quiz(self, quiz_id: str) -> dict[str, Any]:
        return self._api.publish_quiz(self.credential, quiz_id)

    def quizzes(self) -> list[dict[str, Any]]:
        return self._api.list_own_quizzes(self.credential)

    def attempts(self, quiz_id: str) -> list[dict[str, Any]]:
        return self._api.list_attempts(self.credential, quiz_id)

    def result_stats(self, quiz_id: str) -> dict[str, Any]:
        return self._api.get_result_stats(self.credential, quiz_id)


class StudentSession:
    """Remembers which student is taking quizzes on this device."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api
        self._student: dict[str, Any] | None = None

    @property
    def student(self) -> dict[str, Any] | None:
        return self._student

    def login(self, name: str, course: str) -> dict[str, Any]:
        self._student = self._api.resolve_student(name, course)
        return self._student

    def logout(self) -> None:
        self._student = None

    def available_quizzes(self) -> list[dict[str, Any]]:
        return self._api.get_published_quizzes()

    def has_attempted(self, quiz_id: str) -> bool:
        return self._api.has_attempted(self._require_student()["id"], quiz_id)

    def submit(self, quiz_id: str, answers: dict[str, int]) -> dict[str, Any]:
        student = self._require_student()
        return self._api.submit_attempt(
            student["name"],
            student["course"],
            quiz_id,
            list(answers.items()),
        )

    def _require_student(self) -> dict[str, Any]:
        if self._student is None:
            raise UnauthorizedError("Enter your name and course first.")
        return self._student
