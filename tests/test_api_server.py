from __future__ import annotations

from fastapi.testclient import TestClient

from quiz_portal.constants.network_constants import IDENTITY_HEADER, PASSWORD_HEADER
from quiz_portal.core.quiz_manager import QuizManager
from quiz_portal.core.services.authorization import SharedSecretStrategy
from quiz_portal.server.api_server import create_api_app
from tests.quiz_fixtures import ADMIN_IDENTITY, TEACHER_PASSWORD, two_question_payload

TEACHER_HEADERS = {PASSWORD_HEADER: TEACHER_PASSWORD}


def _create_published_quiz(client: TestClient, headers: dict[str, str] = TEACHER_HEADERS) -> str:
    response = client.post(
        "/quizzes",
        json={"title": "Basics", "description": "Warm-up", "questions": two_question_payload()},
        headers=headers,
    )
    assert response.status_code == 201
    quiz_id = response.json()["quiz_id"]
    assert client.post(f"/quizzes/{quiz_id}/publish", headers=headers).json()["success"] is True
    return quiz_id


def test_app_info_reports_auth_mode(password_client: TestClient, role_client: TestClient) -> None:
    assert password_client.get("/").json()["auth_mode"] == "password"
    assert role_client.get("/").json()["auth_mode"] == "role"


def test_resolve_student(password_client: TestClient) -> None:
    response = password_client.post("/students/resolve", json={"name": " Ana ", "course": "CS101"})

    assert response.status_code == 200
    assert response.json() == {"id": "Ana__CS101", "name": "Ana", "course": "CS101"}


def test_resolve_student_rejects_blank_name(password_client: TestClient) -> None:
    response = password_client.post("/students/resolve", json={"name": " ", "course": "CS101"})

    assert response.status_code == 422
    assert response.json() == {"detail": "Name is required."}


def test_student_views_hide_correct_answers(password_client: TestClient) -> None:
    quiz_id = _create_published_quiz(password_client)

    published = password_client.get("/quizzes/published").json()
    quiz = password_client.get(f"/quizzes/{quiz_id}").json()

    assert [q["id"] for q in published] == [quiz_id]
    assert "correct_answer_index" not in quiz["questions"][0]
    assert quiz["questions"][0]["options"] == ["Yes", "No"]


def test_unknown_quiz_is_404(password_client: TestClient) -> None:
    response = password_client.get("/quizzes/missing")

    assert response.status_code == 404
    assert response.json() == {"detail": "Quiz not found."}


def test_submit_then_retake(password_client: TestClient) -> None:
    quiz_id = _create_published_quiz(password_client)
    body = {
        "student_name": "Ana",
        "course": "CS101",
        "quiz_id": quiz_id,
        "answers": [
            {"question_id": "q1", "selected_option_index": 0},
            {"question_id": "q2", "selected_option_index": 1},
        ],
    }

    first = password_client.post("/attempts", json=body)
    body["answers"][0]["selected_option_index"] = 1
    second = password_client.post("/attempts", json=body)

    assert first.status_code == 201
    assert first.json()["score"] == 2
    assert first.json()["is_retake"] is False
    assert second.status_code == 200
    assert second.json()["score"] == 2
    assert second.json()["is_retake"] is True
    assert second.json()["attempt"] == first.json()["attempt"]

    exists = password_client.get(
        "/attempts/exists", params={"student_id": "Ana__CS101", "quiz_id": quiz_id}
    )
    assert exists.json() == {"has_attempted": True}

    attempts = password_client.get(f"/teacher/quizzes/{quiz_id}/attempts", headers=TEACHER_HEADERS)
    assert len(attempts.json()) == 1


def test_privileged_endpoints_reject_missing_or_wrong_password(password_client: TestClient) -> None:
    for headers in ({}, {PASSWORD_HEADER: "wrong"}):
        create = password_client.post(
            "/quizzes",
            json={"title": "Nope", "questions": two_question_payload()},
            headers=headers,
        )
        publish = password_client.post("/quizzes/missing/publish", headers=headers)
        listing = password_client.get("/teacher/quizzes", headers=headers)

        assert create.status_code == 403
        assert publish.status_code == 403
        assert listing.status_code == 403

    assert password_client.get("/teacher/quizzes/all", headers=TEACHER_HEADERS).json() == []


def test_create_quiz_validation_errors(password_client: TestClient) -> None:
    questions = two_question_payload()
    questions[0]["correct_answer_index"] = 3

    response = password_client.post(
        "/quizzes",
        json={"title": "Broken", "questions": questions},
        headers=TEACHER_HEADERS,
    )

    assert response.status_code == 422
    assert "correct answer index" in response.json()["detail"]


def test_update_quiz(password_client: TestClient) -> None:
    quiz_id = _create_published_quiz(password_client)

    response = password_client.put(
        f"/quizzes/{quiz_id}",
        json={"title": "Renamed", "questions": two_question_payload()},
        headers=TEACHER_HEADERS,
    )
    own = password_client.get("/teacher/quizzes", headers=TEACHER_HEADERS).json()

    assert response.json()["success"] is True
    assert own[0]["title"] == "Renamed"
    assert own[0]["published"] is True
    assert own[0]["questions"][1]["correct_answer_index"] == 1


def test_result_stats_endpoint(password_client: TestClient) -> None:
    quiz_id = _create_published_quiz(password_client)
    password_client.post(
        "/attempts",
        json={
            "student_name": "Ana",
            "course": "CS101",
            "quiz_id": quiz_id,
            "answers": [
                {"question_id": "q1", "selected_option_index": 1},
                {"question_id": "q2", "selected_option_index": 1},
            ],
        },
    )

    stats = password_client.get(f"/teacher/quizzes/{quiz_id}/stats", headers=TEACHER_HEADERS).json()

    assert len(stats["attempts"]) == 1
    assert stats["questions"][0]["option_counts"] == [0, 1]
    assert stats["questions"][0]["correct_count"] == 0
    assert stats["questions"][1]["correct_percentage"] == 100.0


def test_import_and_export(password_client: TestClient) -> None:
    created = password_client.post(
        "/quizzes/import",
        json={"text": "Q: Two?\nA: 1\nB: 2\nCORRECT: B\n", "title": "Numbers"},
        headers=TEACHER_HEADERS,
    )
    quiz_id = created.json()["quiz_id"]

    exported = password_client.get(f"/quizzes/{quiz_id}/export", headers=TEACHER_HEADERS)

    assert created.status_code == 201
    assert exported.status_code == 200
    assert exported.text.startswith("TITLE: Numbers")


def test_change_password_flow(password_client: TestClient) -> None:
    changed = password_client.post(
        "/auth/change-password",
        json={"old_password": TEACHER_PASSWORD, "new_password": "xyz789"},
        headers=TEACHER_HEADERS,
    )

    assert changed.json()["success"] is True
    assert password_client.post("/auth/verify", json={"password": TEACHER_PASSWORD}).json() == {"valid": False}
    assert password_client.post("/auth/verify", json={"password": "xyz789"}).json() == {"valid": True}


def test_change_password_to_short_secret() -> None:
    client = TestClient(create_api_app(QuizManager(SharedSecretStrategy("abc"))))

    changed = client.post(
        "/auth/change-password",
        json={"old_password": "abc", "new_password": "xyz"},
        headers={PASSWORD_HEADER: "abc"},
    )

    assert changed.status_code == 200
    assert changed.json()["success"] is True
    assert client.post("/auth/verify", json={"password": "abc"}).json() == {"valid": False}
    assert client.post("/auth/verify", json={"password": "xyz"}).json() == {"valid": True}


def test_change_password_with_wrong_old_password_is_not_an_error(password_client: TestClient) -> None:
    response = password_client.post(
        "/auth/change-password",
        json={"old_password": "nope", "new_password": "xyz789"},
        headers=TEACHER_HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["success"] is False


def test_role_endpoints(role_client: TestClient) -> None:
    caller = {IDENTITY_HEADER: "teacher-1"}
    admin = {IDENTITY_HEADER: ADMIN_IDENTITY}

    assert role_client.get("/roles/me", headers=caller).json() == {"role": "guest", "is_admin": False}
    denied = role_client.post(
        "/quizzes", json={"title": "Quiz", "questions": two_question_payload()}, headers=caller
    )
    assert denied.status_code == 403

    assert role_client.post("/roles/register", headers=caller).json() == {"role": "user"}
    assert role_client.get("/roles/me", headers=caller).json()["role"] == "user"
    quiz_id = _create_published_quiz(role_client, headers=caller)

    assert role_client.put("/roles/teacher-1", json={"role": "admin"}, headers=caller).status_code == 403
    promoted = role_client.put("/roles/teacher-1", json={"role": "admin"}, headers=admin)
    assert promoted.json() == {"identity": "teacher-1", "role": "admin"}
    assert [q["id"] for q in role_client.get("/teacher/quizzes/all", headers=caller).json()] == [quiz_id]


def test_assign_role_targets_path_identity_not_caller(role_client: TestClient) -> None:
    admin = {IDENTITY_HEADER: ADMIN_IDENTITY}

    assigned = role_client.put("/roles/teacher-2", json={"role": "user"}, headers=admin)

    assert assigned.status_code == 200
    assert assigned.json() == {"identity": "teacher-2", "role": "user"}
    assert role_client.get("/roles/me", headers={IDENTITY_HEADER: "teacher-2"}).json()["role"] == "user"
    assert role_client.get("/roles/me", headers=admin).json() == {"role": "admin", "is_admin": True}


def test_strategy_specific_endpoints_are_unavailable(
    password_client: TestClient, role_client: TestClient
) -> None:
    assert password_client.get("/roles/me").status_code == 404
    assert role_client.post("/auth/verify", json={"password": "x"}).status_code == 404
