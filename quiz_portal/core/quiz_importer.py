"""Utilities for importing quizzes from a human-friendly text file.

File format (optional header, then blocks separated by blank lines or '---'):

    TITLE: Quiz title
    DESCRIPTION: Optional one-line description

    Q: Question text. Additional lines until the next marker are treated as
       part of the question.
    A: First option text
    B: Second option text
    C: Further options are optional, letters must be consecutive from A
    CORRECT: A|B|C...

Example:

    TITLE: Arithmetic warm-up

    Q: What is 2 + 2?
    A: 3
    B: 4
    CORRECT: B
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from string import ascii_uppercase

from quiz_portal.constants.quiz_constants import MIN_OPTION_COUNT
from quiz_portal.core.errors import InvalidInputError
from quiz_portal.core.models import QuestionDraft

DEFAULT_IMPORT_TITLE = "Imported quiz"


class QuizImportError(InvalidInputError):
    """Raised when a quiz definition cannot be parsed."""


@dataclass(slots=True)
class ImportedQuiz:
    """Container for imported quiz metadata and questions."""

    title: str
    description: str | None
    questions: list[QuestionDraft]
    source_path: Path | None = None


def load_quiz_from_file(file_path: Path) -> ImportedQuiz:
    text = file_path.read_text(encoding="utf-8")
    imported = parse_quiz_text(text, default_title=file_path.stem)
    imported.source_path = file_path
    return imported


def parse_quiz_text(text: str, default_title: str = DEFAULT_IMPORT_TITLE) -> ImportedQuiz:
    title: str | None = None
    description: str | None = None
    blocks: list[str] = []
    current_block: list[str] = []

    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        upper = stripped.upper()
        if not blocks and not current_block and upper.startswith("TITLE:"):
            title = stripped.split(":", 1)[1].strip() or None
            continue
        if not blocks and not current_block and upper.startswith("DESCRIPTION:"):
            description = stripped.split(":", 1)[1].strip() or None
            continue
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            # Blank line encountered after content - finalize current block
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())

    questions = [_parse_block(position, block) for position, block in enumerate(blocks, start=1)]
    if not questions:
        raise QuizImportError("Quiz file did not contain any questions.")
    return ImportedQuiz(
        title=title or default_title,
        description=description,
        questions=questions,
    )


def _parse_block(position: int, block: str) -> QuestionDraft:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letter: str | None = None
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("CORRECT:"):
            correct_letter = line.split(":", 1)[1].strip().upper()
            current_section = None
            continue

        if len(line) > 2 and line[0].upper() in ascii_uppercase and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in options:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise QuizImportError(
                f"Question {position}: encountered text outside of a known section: '{line}'."
            )

    if not question_lines:
        raise QuizImportError(f"Question {position}: question text missing (Q: ...)")

    letters = list(ascii_uppercase[: len(options)])
    if sorted(options) != letters:
        raise QuizImportError(f"Question {position}: option letters must run from A without gaps.")
    if len(letters) < MIN_OPTION_COUNT:
        raise QuizImportError(
            f"Question {position}: define at least {MIN_OPTION_COUNT} options (A, B, ...)."
        )

    if correct_letter is None:
        raise QuizImportError(f"Question {position}: CORRECT is required.")
    if correct_letter not in letters:
        raise QuizImportError(
            f"Question {position}: CORRECT must be one of {', '.join(letters)}."
        )

    return QuestionDraft(
        id=f"q{position}",
        text="\n".join(question_lines).strip(),
        options=[options[letter].strip() for letter in letters],
        correct_answer_index=letters.index(correct_letter),
    )
