"""Utilities for exporting quizzes to the plain-text format used for imports."""

from __future__ import annotations

from string import ascii_uppercase

from quiz_portal.core.models import Question, Quiz


def serialize_quiz(quiz: Quiz) -> str:
    """Render ``quiz`` in the text import format."""

    header = [f"TITLE: {quiz.title}"]
    if quiz.description:
        header.append(f"DESCRIPTION: {' '.join(quiz.description.splitlines())}")
    blocks = ["\n".join(header)]
    blocks.extend(_serialize_question(question) for question in quiz.questions)
    return "\n\n---\n\n".join(blocks) + "\n"


def _serialize_question(question: Question) -> str:
    lines: list[str] = []

    question_lines = question.text.splitlines() or [question.text]
    lines.append(f"Q: {question_lines[0]}")
    lines.extend(question_lines[1:])

    for letter, option_text in zip(ascii_uppercase, question.options):
        option_lines = option_text.splitlines() or [option_text]
        lines.append(f"{letter}: {option_lines[0]}")
        lines.extend(option_lines[1:])

    lines.append(f"CORRECT: {ascii_uppercase[question.correct_answer_index]}")
    return "\n".join(lines)
