from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from quiz_portal.core.quiz_manager import QuizManager
from quiz_portal.core.services.authorization import (
    Credential,
    RoleBasedStrategy,
    SharedSecretStrategy,
)
from quiz_portal.server.api_server import create_api_app
from tests.quiz_fixtures import ADMIN_IDENTITY, TEACHER_PASSWORD, two_question_drafts


@pytest.fixture
def teacher() -> Credential:
    return Credential(secret=TEACHER_PASSWORD)


@pytest.fixture
def admin() -> Credential:
    return Credential(identity=ADMIN_IDENTITY)


@pytest.fixture
def password_manager() -> QuizManager:
    return QuizManager(SharedSecretStrategy(TEACHER_PASSWORD))


@pytest.fixture
def role_manager() -> QuizManager:
    return QuizManager(RoleBasedStrategy([ADMIN_IDENTITY]))


@pytest.fixture
def published_quiz_id(password_manager: QuizManager, teacher: Credential) -> str:
    quiz_id = password_manager.create_quiz(teacher, "Basics", None, two_question_drafts())
    password_manager.publish_quiz(teacher, quiz_id)
    return quiz_id


@pytest.fixture
def password_client(password_manager: QuizManager) -> TestClient:
    return TestClient(create_api_app(password_manager))


@pytest.fixture
def role_client(role_manager: QuizManager) -> TestClient:
    return TestClient(create_api_app(role_manager))
