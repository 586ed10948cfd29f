"""Authorization gate for instructor-only operations.

Two interchangeable strategies implement :class:`AuthorizationStrategy`:

* :class:`RoleBasedStrategy` keeps a role table (guest, user, admin) keyed by
  caller identity.
* :class:`SharedSecretStrategy` accepts any caller presenting the single
  shared teacher password.

Callers only depend on :meth:`AuthorizationStrategy.authorize` and
:meth:`AuthorizationStrategy.can_manage`. Credentials are passed explicitly on
every call; neither strategy keeps a session.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
import hmac
from threading import Lock

from quiz_portal.constants.quiz_constants import SHARED_AUTHOR
from quiz_portal.core.errors import UnauthorizedError
from quiz_portal.core.models import ActionResult, Quiz, UserRole


class Operation(str, Enum):
    """Instructor-only operations guarded by the gate."""

    CREATE_QUIZ = "create_quiz"
    UPDATE_QUIZ = "update_quiz"
    PUBLISH_QUIZ = "publish_quiz"
    IMPORT_QUIZ = "import_quiz"
    EXPORT_QUIZ = "export_quiz"
    LIST_OWN_QUIZZES = "list_own_quizzes"
    LIST_ALL_QUIZZES = "list_all_quizzes"
    LIST_ATTEMPTS = "list_attempts"
    LIST_ALL_ATTEMPTS = "list_all_attempts"
    VIEW_RESULTS = "view_results"
    CHANGE_SECRET = "change_secret"
    ASSIGN_ROLE = "assign_role"


ADMIN_OPERATIONS = frozenset(
    {Operation.LIST_ALL_QUIZZES, Operation.LIST_ALL_ATTEMPTS, Operation.ASSIGN_ROLE}
)


@dataclass(slots=True, frozen=True)
class Credential:
    """What a caller presents: an identity, a shared secret, or neither."""

    identity: str | None = None
    secret: str | None = None


@dataclass(slots=True, frozen=True)
class Decision:
    allowed: bool
    reason: str = ""
    principal: str | None = None
    is_admin: bool = False

    @classmethod
    def allow(cls, principal: str, is_admin: bool = False) -> Decision:
        return cls(allowed=True, principal=principal, is_admin=is_admin)

    @classmethod
    def deny(cls, reason: str) -> Decision:
        return cls(allowed=False, reason=reason)

    def require(self) -> Decision:
        """Return self when allowed, raise :class:`UnauthorizedError` otherwise."""
        if not self.allowed:
            raise UnauthorizedError(self.reason)
        return self


class AuthorizationStrategy(ABC):
    """Decides whether a credential may perform an instructor-only operation."""

    mode: str

    @abstractmethod
    def authorize(self, operation: Operation, credential: Credential) -> Decision:
        """Return an allow decision naming the acting principal, or a deny with a reason."""

    def can_manage(self, decision: Decision, quiz: Quiz) -> bool:
        """Whether the allowed caller may modify or inspect ``quiz``."""
        return decision.allowed and (decision.is_admin or quiz.author == decision.principal)


class RoleBasedStrategy(AuthorizationStrategy):
    """Role table over caller identities. Unknown identities are guests."""

    mode = "role"

    def __init__(self, admin_identities: tuple[str, ...] | list[str] = ()) -> None:
        self._roles: dict[str, UserRole] = {
            identity: UserRole.ADMIN for identity in admin_identities if identity
        }
        self._lock = Lock()

    def role_of(self, identity: str | None) -> UserRole:
        if not identity:
            return UserRole.GUEST
        with self._lock:
            return self._roles.get(identity, UserRole.GUEST)

    def is_admin(self, identity: str | None) -> bool:
        return self.role_of(identity) is UserRole.ADMIN

    def register(self, identity: str | None) -> UserRole:
        """Promote a guest to ``user``. Already registered identities keep their role."""
        if not identity:
            raise UnauthorizedError("Sign in before registering as a teacher.")
        with self._lock:
            current = self._roles.get(identity, UserRole.GUEST)
            if current is UserRole.GUEST:
                self._roles[identity] = UserRole.USER
                return UserRole.USER
            return current

    def assign_role(self, identity: str, role: UserRole) -> None:
        """Set the role of ``identity``. The caller must have been authorized for ASSIGN_ROLE."""
        with self._lock:
            self._roles[identity] = role

    def authorize(self, operation: Operation, credential: Credential) -> Decision:
        if operation is Operation.CHANGE_SECRET:
            return Decision.deny("Password changes are not available with role-based sign-in.")
        if not credential.identity:
            return Decision.deny("Sign in to continue.")

        role = self.role_of(credential.identity)
        if role is UserRole.GUEST:
            return Decision.deny("Register as a teacher to continue.")
        if operation in ADMIN_OPERATIONS and role is not UserRole.ADMIN:
            return Decision.deny("Admin role required.")
        return Decision.allow(credential.identity, is_admin=role is UserRole.ADMIN)


class SharedSecretStrategy(AuthorizationStrategy):
    """Single shared teacher password, re-validated on every call."""

    mode = "password"

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("Teacher password must not be empty.")
        self._secret = secret
        self._lock = Lock()

    def verify(self, secret: str | None) -> bool:
        if not secret:
            return False
        with self._lock:
            current = self._secret
        return hmac.compare_digest(secret.encode("utf-8"), current.encode("utf-8"))

    def change_secret(self, old_secret: str, new_secret: str) -> ActionResult:
        """Rotate the secret if ``old_secret`` matches the current one exactly."""
        if not new_secret.strip():
            return ActionResult(success=False, message="New password must not be blank.")
        with self._lock:
            if not hmac.compare_digest(old_secret.encode("utf-8"), self._secret.encode("utf-8")):
                return ActionResult(success=False, message="Current password is incorrect.")
            self._secret = new_secret
        return ActionResult(success=True, message="Password changed successfully.")

    def authorize(self, operation: Operation, credential: Credential) -> Decision:
        if operation is Operation.ASSIGN_ROLE:
            return Decision.deny("Role assignment is not available with password sign-in.")
        if not credential.secret:
            return Decision.deny("Teacher password required.")
        if not self.verify(credential.secret):
            return Decision.deny("Invalid teacher password.")
        return Decision.allow(SHARED_AUTHOR, is_admin=True)
