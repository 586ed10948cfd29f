from __future__ import annotations

import pytest

from quiz_portal.core.errors import InvalidInputError
from quiz_portal.core.identity import resolve_student, resolve_student_id


def test_resolve_student_id_trims_and_joins() -> None:
    assert resolve_student_id("  Ana ", " CS101  ") == "Ana__CS101"


def test_resolve_student_id_is_deterministic() -> None:
    assert resolve_student_id("Ana", "CS101") == resolve_student_id("Ana", "CS101")


def test_resolve_student_keeps_trimmed_fields() -> None:
    student = resolve_student(" Ana ", " CS101 ")

    assert student.id == "Ana__CS101"
    assert student.name == "Ana"
    assert student.course == "CS101"


@pytest.mark.parametrize(
    ("name", "course"),
    [
        ("", "CS101"),
        ("Ana", "   "),
        ("Ana__", "x"),
        ("Ana", "__x"),
        ("Ana_", "CS"),
    ],
)
def test_resolve_student_id_rejects_blank_or_ambiguous_input(name: str, course: str) -> None:
    with pytest.raises(InvalidInputError):
        resolve_student_id(name, course)


def test_distinct_pairs_map_to_distinct_ids() -> None:
    assert resolve_student_id("Ana", "CS101") != resolve_student_id("Ana", "CS102")
    assert resolve_student_id("Ana", "_CS") == "Ana___CS"
