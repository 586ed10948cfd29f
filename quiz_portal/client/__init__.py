"""Caller-side API client and session state."""

from .api_client import ApiClient
from .sessions import StudentSession, TeacherSession

__all__ = ["ApiClient", "StudentSession", "TeacherSession"]
