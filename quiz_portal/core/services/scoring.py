"""Grading of submitted answers against a quiz."""

from __future__ import annotations

from collections.abc import Sequence

from quiz_portal.core.errors import InvalidInputError
from quiz_portal.core.models import Answer, Quiz

SubmittedPair = tuple[str, int]


def grade_answers(quiz: Quiz, submitted: Sequence[SubmittedPair]) -> tuple[Answer, ...]:
    """Grade one answer per question, returned in quiz question order.

    Unknown or repeated question ids, missing questions and out-of-range
    option indexes are rejected.
    """
    selections: dict[str, int] = {}
    for question_id, selected_index in submitted:
        question = quiz.find_question(question_id)
        if question is None:
            raise InvalidInputError(f"Unknown question id '{question_id}'.")
        if question_id in selections:
            raise InvalidInputError(f"Question '{question_id}' was answered more than once.")
        if isinstance(selected_index, bool) or not 0 <= selected_index < len(question.options):
            raise InvalidInputError(f"Selected option for question '{question_id}' is out of range.")
        selections[question_id] = selected_index

    missing = [q.id for q in quiz.questions if q.id not in selections]
    if missing:
        raise InvalidInputError("Please answer all questions before submitting.")

    return tuple(
        Answer(
            question_id=question.id,
            selected_option_index=selections[question.id],
            correct_answer_index=question.correct_answer_index,
            is_correct=selections[question.id] == question.correct_answer_index,
        )
        for question in quiz.questions
    )


def score_answers(answers: Sequence[Answer]) -> int:
    return sum(1 for answer in answers if answer.is_correct)
