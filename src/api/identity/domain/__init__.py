"""Identity domain layer."""

from identity.domain.claims import (
    FEDERATED_IDENTITY_CLAIMS,
    SESSION_TOKEN_CLAIMS,
    ClaimMapping,
)
from identity.domain.schemes import (
    AuthScheme,
    AuthSchemeConfig,
    DevelopmentFallback,
    FederatedIdentityScheme,
    RequestCredentials,
    SessionTokenScheme,
    Unauthenticated,
    select_auth_scheme,
)
from identity.domain.value_objects import (
    DEVELOPMENT_IDENTITY,
    AuthContext,
    AuthMethod,
    UserRole,
)
from shared_kernel.runtime_environment import RuntimeEnvironment

__all__ = [
    "DEVELOPMENT_IDENTITY",
    "FEDERATED_IDENTITY_CLAIMS",
    "SESSION_TOKEN_CLAIMS",
    "ClaimMapping",
    "AuthContext",
    "AuthMethod",
    "AuthScheme",
    "AuthSchemeConfig",
    "DevelopmentFallback",
    "FederatedIdentityScheme",
    "RequestCredentials",
    "RuntimeEnvironment",
    "SessionTokenScheme",
    "Unauthenticated",
    "UserRole",
    "select_auth_scheme",
]
