"""Derivation of stable student identities from free-text inputs."""

from __future__ import annotations

from quiz_portal.constants.quiz_constants import STUDENT_ID_SEPARATOR
from quiz_portal.core.errors import InvalidInputError
from quiz_portal.core.models import Student


def resolve_student_id(name: str, course: str) -> str:
    """Return the student id for ``(name, course)``.

    Both inputs are trimmed and joined with ``STUDENT_ID_SEPARATOR``. Inputs
    that are blank or contain the separator are rejected, as are names ending
    in the separator character, so every id splits back into exactly one pair.
    """

    cleaned_name = _clean_part(name, "Name")
    if cleaned_name.endswith(STUDENT_ID_SEPARATOR[0]):
        raise InvalidInputError(f"Name must not end with '{STUDENT_ID_SEPARATOR[0]}'.")
    cleaned_course = _clean_part(course, "Course")
    return f"{cleaned_name}{STUDENT_ID_SEPARATOR}{cleaned_course}"


def resolve_student(name: str, course: str) -> Student:
    student_id = resolve_student_id(name, course)
    return Student(id=student_id, name=name.strip(), course=course.strip())


def _clean_part(value: str, label: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise InvalidInputError(f"{label} is required.")
    if STUDENT_ID_SEPARATOR in cleaned:
        raise InvalidInputError(f"{label} must not contain '{STUDENT_ID_SEPARATOR}'.")
    return cleaned
