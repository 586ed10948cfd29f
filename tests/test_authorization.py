from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from quiz_portal.core.errors import UnauthorizedError
from quiz_portal.core.models import Quiz, UserRole
from quiz_portal.core.services.authorization import (
    Credential,
    Operation,
    RoleBasedStrategy,
    SharedSecretStrategy,
)


def _quiz(author: str) -> Quiz:
    return Quiz(id="quiz-1", title="Quiz", author=author, questions=())


def test_unknown_identity_starts_as_guest() -> None:
    strategy = RoleBasedStrategy()

    assert strategy.role_of("someone") is UserRole.GUEST
    assert strategy.role_of(None) is UserRole.GUEST


def test_register_promotes_guest_and_is_immediately_visible() -> None:
    strategy = RoleBasedStrategy()

    assert strategy.register("teacher-1") is UserRole.USER
    assert strategy.role_of("teacher-1") is UserRole.USER
    assert strategy.authorize(Operation.CREATE_QUIZ, Credential(identity="teacher-1")).allowed


def test_register_does_not_demote_admin() -> None:
    strategy = RoleBasedStrategy(["boss"])

    assert strategy.register("boss") is UserRole.ADMIN
    assert strategy.is_admin("boss") is True


def test_register_requires_identity() -> None:
    with pytest.raises(UnauthorizedError):
        RoleBasedStrategy().register(None)


@pytest.mark.parametrize(
    ("identity", "operation", "allowed"),
    [
        (None, Operation.CREATE_QUIZ, False),
        ("guest-1", Operation.CREATE_QUIZ, False),
        ("user-1", Operation.CREATE_QUIZ, True),
        ("user-1", Operation.LIST_ALL_QUIZZES, False),
        ("user-1", Operation.ASSIGN_ROLE, False),
        ("admin-1", Operation.LIST_ALL_QUIZZES, True),
        ("admin-1", Operation.ASSIGN_ROLE, True),
        ("admin-1", Operation.CHANGE_SECRET, False),
    ],
)
def test_role_gate_rules(identity: str | None, operation: Operation, allowed: bool) -> None:
    strategy = RoleBasedStrategy(["admin-1"])
    strategy.register("user-1")

    decision = strategy.authorize(operation, Credential(identity=identity))

    assert decision.allowed is allowed
    if not allowed:
        assert decision.reason


def test_guest_is_prompted_to_register() -> None:
    decision = RoleBasedStrategy().authorize(Operation.CREATE_QUIZ, Credential(identity="guest-1"))

    with pytest.raises(UnauthorizedError, match="Register"):
        decision.require()


def test_assign_role_can_demote() -> None:
    strategy = RoleBasedStrategy(["admin-1"])
    strategy.register("user-1")

    strategy.assign_role("user-1", UserRole.GUEST)

    assert strategy.authorize(Operation.CREATE_QUIZ, Credential(identity="user-1")).allowed is False


def test_role_can_manage_own_quizzes_and_admin_everything() -> None:
    strategy = RoleBasedStrategy(["admin-1"])
    strategy.register("user-1")
    user_decision = strategy.authorize(Operation.UPDATE_QUIZ, Credential(identity="user-1"))
    admin_decision = strategy.authorize(Operation.UPDATE_QUIZ, Credential(identity="admin-1"))

    assert strategy.can_manage(user_decision, _quiz("user-1")) is True
    assert strategy.can_manage(user_decision, _quiz("user-2")) is False
    assert strategy.can_manage(admin_decision, _quiz("user-2")) is True


@pytest.mark.parametrize(
    ("secret", "allowed"),
    [(None, False), ("", False), ("wrong", False), ("abc123", True)],
)
def test_secret_gate_requires_exact_secret(secret: str | None, allowed: bool) -> None:
    strategy = SharedSecretStrategy("abc123")

    decision = strategy.authorize(Operation.PUBLISH_QUIZ, Credential(secret=secret))

    assert decision.allowed is allowed
    assert strategy.verify(secret) is allowed


def test_secret_gate_denies_role_assignment() -> None:
    strategy = SharedSecretStrategy("abc123")

    assert strategy.authorize(Operation.ASSIGN_ROLE, Credential(secret="abc123")).allowed is False


@pytest.mark.parametrize(
    ("old_secret", "new_secret"),
    [("abc", "xyz"), ("abc", "x"), ("abc", "  padded secret  ")],
)
def test_change_secret_rotates_on_exact_match(old_secret: str, new_secret: str) -> None:
    strategy = SharedSecretStrategy(old_secret)

    result = strategy.change_secret(old_secret, new_secret)

    assert result.success is True
    assert strategy.verify(old_secret) is False
    assert strategy.verify(new_secret) is True


@pytest.mark.parametrize(
    ("old_secret", "new_secret"),
    [("wrong", "xyz789"), ("abc123 ", "xyz789"), ("abc123", ""), ("abc123", "   ")],
)
def test_change_secret_reports_failure_without_rotating(old_secret: str, new_secret: str) -> None:
    strategy = SharedSecretStrategy("abc123")

    result = strategy.change_secret(old_secret, new_secret)

    assert result.success is False
    assert result.message
    assert strategy.verify("abc123") is True


def test_concurrent_rotations_from_same_secret_apply_once() -> None:
    strategy = SharedSecretStrategy("abc123")
    candidates = [f"new-secret-{n}" for n in range(8)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda new: strategy.change_secret("abc123", new), candidates))

    winners = [new for new, result in zip(candidates, results) if result.success]
    assert len(winners) == 1
    assert strategy.verify(winners[0]) is True
