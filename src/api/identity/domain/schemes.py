"""Credential scheme selection.

Which scheme handles a request is decided once, up front, by a pure
function of the presented credential material, which schemes are enabled,
and the runtime environment. The result is one of a closed set of
variants that the resolver matches on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from shared_kernel.runtime_environment import RuntimeEnvironment


@dataclass(frozen=True)
class RequestCredentials:
    """Raw credential material taken from a request.

    Attributes:
        session_token: Bearer token from the Authorization header.
        federated_token: ID token from the federated identity header.
    """

    session_token: str | None = None
    federated_token: str | None = None


@dataclass(frozen=True)
class AuthSchemeConfig:
    """Which credential schemes this deployment accepts, and where it runs."""

    session_token_enabled: bool
    federated_identity_enabled: bool
    runtime: RuntimeEnvironment = field(default_factory=RuntimeEnvironment)

    @property
    def any_scheme_enabled(self) -> bool:
        return self.session_token_enabled or self.federated_identity_enabled

    def describe(self) -> dict[str, Any]:
        """Scheme configuration for security events."""
        return {
            "sessionTokenEnabled": self.session_token_enabled,
            "federatedIdentityEnabled": self.federated_identity_enabled,
        }


@dataclass(frozen=True)
class SessionTokenScheme:
    token: str


@dataclass(frozen=True)
class FederatedIdentityScheme:
    token: str


@dataclass(frozen=True)
class DevelopmentFallback:
    pass


@dataclass(frozen=True)
class Unauthenticated:
    """No usable credentials.

    Attributes:
        production: Whether the runtime was classified as production.
        signals: The environment signals behind that classification.
    """

    production: bool
    signals: dict[str, Any] = field(default_factory=dict)


AuthScheme = (
    SessionTokenScheme | FederatedIdentityScheme | DevelopmentFallback | Unauthenticated
)


def _present(value: str | None) -> bool:
    return value is not None and value.strip() != ""


def select_auth_scheme(
    credentials: RequestCredentials, config: AuthSchemeConfig
) -> AuthScheme:
    """Pick the scheme that will authenticate a request.

    The session token wins when both enabled schemes have credentials.
    Credentials for a disabled scheme are ignored. The development
    fallback is only chosen when no scheme is enabled at all and the
    runtime is not production; a deployment that enables a scheme always
    requires its credentials.
    """
    if config.session_token_enabled and _present(credentials.session_token):
        return SessionTokenScheme(token=credentials.session_token.strip())

    if config.federated_identity_enabled and _present(credentials.federated_token):
        return FederatedIdentityScheme(token=credentials.federated_token.strip())

    production = config.runtime.is_production
    if not config.any_scheme_enabled and not production:
        return DevelopmentFallback()

    return Unauthenticated(production=production, signals=config.runtime.signals())
