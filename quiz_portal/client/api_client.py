"""HTTP client for the quiz portal API."""

from __future__ import annotations

from typing import Any

import httpx

from quiz_portal.constants.network_constants import IDENTITY_HEADER, PASSWORD_HEADER
from quiz_portal.core.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    QuizPortalError,
    UnauthorizedError,
)
from quiz_portal.core.services.authorization import Credential

_ERRORS_BY_STATUS: dict[int, type[QuizPortalError]] = {
    401: UnauthorizedError,
    403: UnauthorizedError,
    404: NotFoundError,
    409: ConflictError,
    422: InvalidInputError,
}

DEFAULT_TIMEOUT_SECONDS = 10.0


class ApiClient:
    """Thin RPC wrapper: one method per endpoint, failures raised as typed errors.

    Any ``httpx.Client`` works as transport, including FastAPI's ``TestClient``.
    """

    def __init__(self, http: httpx.Client) -> None:
        self._http = http

    @classmethod
    def connect(cls, base_url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> ApiClient:
        return cls(httpx.Client(base_url=base_url, timeout=timeout))

    def close(self) -> None:
        self._http.close()

    # --- Student operations ---

    def get_app_info(self) -> dict[str, Any]:
        return self._request("GET", "/")

    def resolve_student(self, name: str, course: str) -> dict[str, Any]:
        return self._request("POST", "/students/resolve", json={"name": name, "course": course})

    def get_published_quizzes(self) -> list[dict[str, Any]]:
        return self._request("GET", "/quizzes/published")

    def get_quiz(self, quiz_id: str) -> dict[str, Any]:
        return self._request("GET", f"/quizzes/{quiz_id}")

    def has_attempted(self, student_id: str, quiz_id: str) -> bool:
        payload = self._request(
            "GET", "/attempts/exists", params={"student_id": student_id, "quiz_id": quiz_id}
        )
        return bool(payload["has_attempted"])

    def submit_attempt(
        self,
        student_name: str,
        course: str,
        quiz_id: str,
        answers: list[tuple[str, int]],
    ) -> dict[str, Any]:
        body = {
            "student_name": student_name,
            "course": course,
            "quiz_id": quiz_id,
            "answers": [
                {"question_id": question_id, "selected_option_index": index}
                for question_id, index in answers
            ],
        }
        return self._request("POST", "/attempts", json=body)

    # --- Teacher operations ---

    def create_quiz(
        self,
        credential: Credential,
        title: str,
        description: str | None,
        questions: list[dict[str, Any]],
    ) -> str:
        body = {"title": title, "description": description, "questions": questions}
        return self._request("POST", "/quizzes", credential, json=body)["quiz_id"]

    def import_quiz(self, credential: Credential, text: str, title: str | None = None) -> str:
        body = {"text": text, "title": title}
        return self._request("POST", "/quizzes/import", credential, json=body)["quiz_id"]

    def update_quiz(
        self,
        credential: Credential,
        quiz_id: str,
        title: str,
        description: str | None,
        questions: list[dict[str, Any]],
    ) -> dict[str, Any]:
        body = {"title": title, "description": description, "questions": questions}
        return self._request("PUT", f"/quizzes/{quiz_id}", credential, json=body)

    def publish_quiz(self, credential: Credential, quiz_id: str) -> dict[str, Any]:
        return self._request("POST", f"/quizzes/{quiz_id}/publish", credential)

    def export_quiz(self, credential: Credential, quiz_id: str) -> str:
        response = self._send("GET", f"/quizzes/{quiz_id}/export", credential)
        return response.text

    def list_own_quizzes(self, credential: Credential) -> list[dict[str, Any]]:
        return self._request("GET", "/teacher/quizzes", credential)

    def list_all_quizzes(self, credential: Credential) -> list[dict[str, Any]]:
        return self._request("GET", "/teacher/quizzes/all", credential)

    def list_attempts(self, credential: Credential, quiz_id: str) -> list[dict[str, Any]]:
        return self._request("GET", f"/teacher/quizzes/{quiz_id}/attempts", credential)

    def list_answers_by_student(self, credential: Credential, quiz_id: str) -> list[dict[str, Any]]:
        return self._request("GET", f"/teacher/quizzes/{quiz_id}/answers", credential)

    def get_result_stats(self, credential: Credential, quiz_id: str) -> dict[str, Any]:
        return self._request("GET", f"/teacher/quizzes/{quiz_id}/stats", credential)

    def list_all_attempts(self, credential: Credential) -> list[dict[str, Any]]:
        return self._request("GET", "/teacher/attempts", credential)

    def list_attempts_for_student(
        self, credential: Credential, name: str, course: str
    ) -> list[dict[str, Any]]:
        return self._request(
            "GET", "/teacher/students/attempts", credential, params={"name": name, "course": course}
        )

    # --- Authorization ---

    def verify_secret(self, secret: str) -> bool:
        return bool(self._request("POST", "/auth/verify", json={"password": secret})["valid"])

    def change_secret(self, credential: Credential, old_secret: str, new_secret: str) -> dict[str, Any]:
        body = {"old_password": old_secret, "new_password": new_secret}
        return self._request("POST", "/auth/change-password", credential, json=body)

    def get_role(self, credential: Credential) -> dict[str, Any]:
        return self._request("GET", "/roles/me", credential)

    def register(self, credential: Credential) -> str:
        return self._request("POST", "/roles/register", credential)["role"]

    def assign_role(self, credential: Credential, identity: str, role: str) -> dict[str, Any]:
        return self._request("PUT", f"/roles/{identity}", credential, json={"role": role})

    # --- Transport ---

    def _request(
        self,
        method: str,
        path: str,
        credential: Credential | None = None,
        **kwargs: Any,
    ) -> Any:
        return self._send(method, path, credential, **kwargs).json()

    def _send(
        self,
        method: str,
        path: str,
        credential: Credential | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        response = self._http.request(method, path, headers=_credential_headers(credential), **kwargs)
        if response.is_success:
            return response
        error_type = _ERRORS_BY_STATUS.get(response.status_code, QuizPortalError)
        raise error_type(_error_message(response))


def _credential_headers(credential: Credential | None) -> dict[str, str]:
    headers: dict[str, str] = {}
    if credential is None:
        return headers
    if credential.secret:
        headers[PASSWORD_HEADER] = credential.secret
    if credential.identity:
        headers[IDENTITY_HEADER] = credential.identity
    return headers


def _error_message(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return response.text or f"Request failed with status {response.status_code}."
    if isinstance(detail, str):
        return detail
    return str(detail) if detail else f"Request failed with status {response.status_code}."
