from __future__ import annotations

from quiz_portal.core.models import QuestionDraft

TEACHER_PASSWORD = "abc123"
ADMIN_IDENTITY = "admin-principal"


def two_question_drafts() -> list[QuestionDraft]:
    return [
        QuestionDraft(id="q1", text="Is water wet?", options=["Yes", "No"], correct_answer_index=0),
        QuestionDraft(id="q2", text="Is fire cold?", options=["Yes", "No"], correct_answer_index=1),
    ]


def two_question_payload() -> list[dict[str, object]]:
    return [
        {"id": "q1", "text": "Is water wet?", "options": ["Yes", "No"], "correct_answer_index": 0},
        {"id": "q2", "text": "Is fire cold?", "options": ["Yes", "No"], "correct_answer_index": 1},
    ]
