"""Value objects for the identity domain."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class AuthMethod(StrEnum):
    """Credential scheme that produced an auth context."""

    SESSION_TOKEN = "session_token"
    FEDERATED_IDENTITY = "federated_identity"
    DEVELOPMENT = "development"


class UserRole(StrEnum):
    """Roles a user can hold within a tenant.

    ``USER`` is a legacy role kept for tokens issued before the current
    role set; it carries no more rights than ``VIEWER``.
    """

    ADMIN = "admin"
    MANAGER = "manager"
    EDITOR = "editor"
    VIEWER = "viewer"
    USER = "user"

    @classmethod
    def from_claim(cls, value: object) -> UserRole:
        """Map a role claim to a role, defaulting to the least privileged.

        Organization-scoped claims such as ``org:admin`` drop their prefix,
        and ``member`` is the session issuer's name for an editor.
        """
        if not isinstance(value, str):
            return cls.VIEWER
        name = value.strip().lower().removeprefix("org:")
        if name == "member":
            return cls.EDITOR
        try:
            return cls(name)
        except ValueError:
            return cls.VIEWER


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller for the duration of one request.

    Never persisted. ``auth_method`` is ``DEVELOPMENT`` only outside
    production.
    """

    tenant_id: str
    user_id: str
    role: UserRole
    auth_method: AuthMethod

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


DEVELOPMENT_IDENTITY = AuthContext(
    tenant_id="dev-tenant",
    user_id="dev-user",
    role=UserRole.ADMIN,
    auth_method=AuthMethod.DEVELOPMENT,
)
"""Fixed identity handed out when no credential scheme is configured locally."""
