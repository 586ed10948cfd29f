"""Error taxonomy shared by the core services and the API layer."""

from __future__ import annotations


class QuizPortalError(Exception):
    """Base class for every failure reported to a caller."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(QuizPortalError):
    """Unknown quiz or question, or a quiz students are not allowed to see."""

    status_code = 404


class UnauthorizedError(QuizPortalError):
    """Missing or invalid credential, or insufficient role."""

    status_code = 403


class InvalidInputError(QuizPortalError):
    """Rejected quiz content, answers or student details."""

    status_code = 422


class ConflictError(QuizPortalError):
    """A second ledger insert for an existing (student, quiz) key."""

    status_code = 409


class UnsupportedOperationError(QuizPortalError):
    """Operation belongs to the authorization strategy that is not configured."""

    status_code = 404
