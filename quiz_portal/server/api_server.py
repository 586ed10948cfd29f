"""FastAPI server that exposes the student and teacher endpoints."""

from __future__ import annotations

from fastapi import Depends, FastAPI, Header, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field
import uvicorn

from quiz_portal.constants.about import APP_ABOUT_TEXT, APP_NAME, APP_VERSION
from quiz_portal.constants.network_constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    IDENTITY_HEADER,
    PASSWORD_HEADER,
)
from quiz_portal.core.errors import QuizPortalError
from quiz_portal.core.models import (
    ActionResult,
    Answer,
    Question,
    QuestionDraft,
    QuestionStats,
    Quiz,
    QuizResultStats,
    StudentAttempt,
    UserRole,
)
from quiz_portal.core.quiz_manager import QuizManager
from quiz_portal.core.services.authorization import Credential


class QuestionPayload(BaseModel):
    """Question as authored in the quiz editor."""

    id: str | None = None
    text: str
    options: list[str]
    correct_answer_index: int

    def to_draft(self) -> QuestionDraft:
        return QuestionDraft(
            id=self.id,
            text=self.text,
            options=list(self.options),
            correct_answer_index=self.correct_answer_index,
        )


class QuizPayload(BaseModel):
    """Payload schema for creating or replacing a quiz."""

    title: str
    description: str | None = None
    questions: list[QuestionPayload]

    def drafts(self) -> list[QuestionDraft]:
        return [question.to_draft() for question in self.questions]


class ImportPayload(BaseModel):
    text: str
    title: str | None = None


class StudentPayload(BaseModel):
    name: str
    course: str


class AnswerPayload(BaseModel):
    """One selected option within a submitted attempt."""

    question_id: str
    selected_option_index: int


class AttemptPayload(BaseModel):
    """Payload schema for submitted attempts."""

    student_name: str
    course: str
    quiz_id: str
    answers: list[AnswerPayload] = Field(default_factory=list)


class VerifyPayload(BaseModel):
    password: str


class ChangePasswordPayload(BaseModel):
    old_password: str
    new_password: str


class RolePayload(BaseModel):
    role: UserRole


def _get_quiz_manager_dependency(quiz_manager: QuizManager):
    def dependency() -> QuizManager:
        return quiz_manager

    return dependency


def _get_credential(
    caller_password: str | None = Header(default=None, alias=PASSWORD_HEADER),
    caller_identity: str | None = Header(default=None, alias=IDENTITY_HEADER),
) -> Credential:
    return Credential(identity=caller_identity or None, secret=caller_password or None)


def _question_to_dict(question: Question, include_answers: bool) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": question.id,
        "text": question.text,
        "options": list(question.options),
    }
    if include_answers:
        payload["correct_answer_index"] = question.correct_answer_index
    return payload


def _quiz_to_dict(quiz: Quiz, include_answers: bool = True) -> dict[str, object]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "published": quiz.published,
        "author": quiz.author,
        "questions": [_question_to_dict(q, include_answers) for q in quiz.questions],
    }


def _answer_to_dict(answer: Answer) -> dict[str, object]:
    return {
        "question_id": answer.question_id,
        "selected_option_index": answer.selected_option_index,
        "correct_answer_index": answer.correct_answer_index,
        "is_correct": answer.is_correct,
    }


def _attempt_to_dict(attempt: StudentAttempt) -> dict[str, object]:
    return {
        "student_id": attempt.student_id,
        "student_name": attempt.student_name,
        "course": attempt.course,
        "quiz_id": attempt.quiz_id,
        "answers": [_answer_to_dict(a) for a in attempt.answers],
        "score": attempt.score,
        "timestamp": attempt.timestamp.isoformat(),
    }


def _question_stats_to_dict(stats: QuestionStats) -> dict[str, object]:
    return {
        "question_id": stats.question_id,
        "answers": [_answer_to_dict(a) for a in stats.answers],
        "option_counts": list(stats.option_counts),
        "correct_count": stats.correct_count,
        "total_answers": stats.total_answers,
        "correct_percentage": stats.correct_percentage,
    }


def _stats_to_dict(stats: QuizResultStats) -> dict[str, object]:
    return {
        "quiz_id": stats.quiz_id,
        "attempts": [_attempt_to_dict(a) for a in stats.attempts],
        "questions": [_question_stats_to_dict(q) for q in stats.questions],
    }


def _action_to_dict(result: ActionResult) -> dict[str, object]:
    return {"success": result.success, "message": result.message}


def create_api_app(quiz_manager: QuizManager) -> FastAPI:
    """Create a FastAPI application wired to the provided quiz manager."""
    app = FastAPI(title=f"{APP_NAME} API", description=APP_ABOUT_TEXT, version=APP_VERSION)
    quiz_manager_dep = _get_quiz_manager_dependency(quiz_manager)

    @app.exception_handler(QuizPortalError)
    async def handle_portal_error(request: Request, exc: QuizPortalError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.get("/")
    def get_app_info(manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        return {"name": APP_NAME, "version": APP_VERSION, "auth_mode": manager.auth_mode}

    # --- Student endpoints ---

    @app.post("/students/resolve")
    def resolve_student(
        payload: StudentPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        student = manager.resolve_student(payload.name, payload.course)
        return {"id": student.id, "name": student.name, "course": student.course}

    @app.get("/quizzes/published")
    def get_published_quizzes(manager: QuizManager = Depends(quiz_manager_dep)) -> list[dict[str, object]]:
        return [_quiz_to_dict(q, include_answers=False) for q in manager.get_published_quizzes()]

    @app.get("/quizzes/{quiz_id}")
    def get_quiz(quiz_id: str, manager: QuizManager = Depends(quiz_manager_dep)) -> dict[str, object]:
        return _quiz_to_dict(manager.get_quiz(quiz_id), include_answers=False)

    @app.get("/attempts/exists")
    def has_attempted(
        student_id: str,
        quiz_id: str,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        return {"has_attempted": manager.has_attempted(student_id, quiz_id)}

    @app.post("/attempts", status_code=201)
    def submit_attempt(
        payload: AttemptPayload,
        response: Response,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        result = manager.submit_attempt(
            payload.student_name,
            payload.course,
            payload.quiz_id,
            [(a.question_id, a.selected_option_index) for a in payload.answers],
        )
        if result.is_retake:
            response.status_code = 200
        return {
            "attempt": _attempt_to_dict(result.attempt),
            "answers": [_answer_to_dict(a) for a in result.answers],
            "is_retake": result.is_retake,
            "score": result.score,
        }

    # --- Teacher endpoints ---

    @app.post("/quizzes", status_code=201)
    def create_quiz(
        payload: QuizPayload,
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        quiz_id = manager.create_quiz(credential, payload.title, payload.description, payload.drafts())
        return {"quiz_id": quiz_id}

    @app.post("/quizzes/import", status_code=201)
    def import_quiz(
        payload: ImportPayload,
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        if payload.title:
            quiz_id = manager.import_quiz(credential, payload.text, default_title=payload.title)
        else:
            quiz_id = manager.import_quiz(credential, payload.text)
        return {"quiz_id": quiz_id}

    @app.put("/quizzes/{quiz_id}")
    def update_quiz(
        quiz_id: str,
        payload: QuizPayload,
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        result = manager.update_quiz(
            credential, quiz_id, payload.title, payload.description, payload.drafts()
        )
        return _action_to_dict(result)

    @app.post("/quizzes/{quiz_id}/publish")
    def publish_quiz(
        quiz_id: str,
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        return _action_to_dict(manager.publish_quiz(credential, quiz_id))

    @app.get("/quizzes/{quiz_id}/export", response_class=PlainTextResponse)
    def export_quiz(
        quiz_id: str,
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> str:
        return manager.export_quiz(credential, quiz_id)

    @app.get("/teacher/quizzes")
    def list_own_quizzes(
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        return [_quiz_to_dict(q) for q in manager.list_own_quizzes(credential)]

    @app.get("/teacher/quizzes/all")
    def list_all_quizzes(
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        return [_quiz_to_dict(q) for q in manager.list_all_quizzes(credential)]

    @app.get("/teacher/quizzes/{quiz_id}/attempts")
    def list_attempts(
        quiz_id: str,
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        return [_attempt_to_dict(a) for a in manager.list_attempts(credential, quiz_id)]

    @app.get("/teacher/quizzes/{quiz_id}/answers")
    def list_answers_by_student(
        quiz_id: str,
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        return [
            {"student_id": student_id, "answers": [_answer_to_dict(a) for a in answers]}
            for student_id, answers in manager.list_answers_by_student(credential, quiz_id)
        ]

    @app.get("/teacher/quizzes/{quiz_id}/stats")
    def get_result_stats(
        quiz_id: str,
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        return _stats_to_dict(manager.get_result_stats(credential, quiz_id))

    @app.get("/teacher/attempts")
    def list_all_attempts(
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        return [_attempt_to_dict(a) for a in manager.list_all_attempts(credential)]

    @app.get("/teacher/students/attempts")
    def list_attempts_for_student(
        name: str,
        course: str,
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> list[dict[str, object]]:
        attempts = manager.list_attempts_for_student(credential, name, course)
        return [_attempt_to_dict(a) for a in attempts]

    # --- Shared-secret authorization ---

    @app.post("/auth/verify")
    def verify_password(
        payload: VerifyPayload,
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        return {"valid": manager.verify_secret(payload.password)}

    @app.post("/auth/change-password")
    def change_password(
        payload: ChangePasswordPayload,
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        result = manager.change_secret(credential, payload.old_password, payload.new_password)
        return _action_to_dict(result)

    # --- Role-based authorization ---

    @app.get("/roles/me")
    def get_role(
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        return {
            "role": manager.get_role(credential).value,
            "is_admin": manager.is_caller_admin(credential),
        }

    @app.post("/roles/register")
    def register(
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        return {"role": manager.register(credential).value}

    @app.put("/roles/{identity}")
    def assign_role(
        identity: str,
        payload: RolePayload,
        credential: Credential = Depends(_get_credential),
        manager: QuizManager = Depends(quiz_manager_dep),
    ) -> dict[str, object]:
        manager.assign_role(credential, identity, payload.role)
        return {"identity": identity, "role": payload.role.value}

    return app


def run_api_server(
    quiz_manager: QuizManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    log_level: str = "info",
) -> None:
    """Serve the API in the foreground until interrupted."""
    app = create_api_app(quiz_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level=log_level.lower())
    server = uvicorn.Server(config)
    server.run()
