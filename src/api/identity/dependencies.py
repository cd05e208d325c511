"""FastAPI dependencies for the identity bounded context.

``get_auth_context`` is the single source of truth for who is calling.
FastAPI caches it per request, so every dependency that needs the
caller shares one resolution.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from identity.application import AuthContextResolver
from identity.domain import AuthContext, RequestCredentials
from identity.infrastructure import (
    build_auth_scheme_config,
    build_federated_identity_verifier,
    build_session_token_verifier,
    claim_mapping_for,
)
from identity.ports import AuthenticationInvalidError, AuthenticationRequiredError
from infrastructure.dependencies import get_security_event_sink
from infrastructure.settings import (
    get_federated_identity_auth_settings,
    get_runtime_settings,
    get_session_token_auth_settings,
)
from shared_kernel.security_events import (
    SecurityEventSink,
    SecurityEventType,
    SecuritySeverity,
)

FEDERATED_IDENTITY_HEADER = "X-Federated-Identity"

_WWW_AUTHENTICATE = "Bearer"

# auto_error=False so missing credentials reach the resolver, which decides
# between rejecting and the development identity.
http_bearer = HTTPBearer(auto_error=False)


@lru_cache
def get_auth_context_resolver() -> AuthContextResolver:
    """Get cached auth context resolver.

    Uses lru_cache so the token verifiers, and their JWKS caches, are
    reused across requests.
    """
    session_settings = get_session_token_auth_settings()
    federated_settings = get_federated_identity_auth_settings()
    return AuthContextResolver(
        config=build_auth_scheme_config(
            session_settings, federated_settings, get_runtime_settings()
        ),
        security_events=get_security_event_sink(),
        session_token_verifier=build_session_token_verifier(session_settings),
        federated_identity_verifier=build_federated_identity_verifier(
            federated_settings
        ),
        session_token_claims=claim_mapping_for(session_settings),
        federated_identity_claims=claim_mapping_for(federated_settings),
    )


def get_request_credentials(
    bearer: Annotated[HTTPAuthorizationCredentials | None, Depends(http_bearer)] = None,
    federated_token: Annotated[
        str | None, Header(alias=FEDERATED_IDENTITY_HEADER)
    ] = None,
) -> RequestCredentials:
    """Collect raw credential material from the request headers."""
    return RequestCredentials(
        session_token=bearer.credentials if bearer is not None else None,
        federated_token=federated_token,
    )


async def get_auth_context(
    credentials: Annotated[RequestCredentials, Depends(get_request_credentials)],
    resolver: Annotated[AuthContextResolver, Depends(get_auth_context_resolver)],
) -> AuthContext:
    """Resolve the caller's auth context.

    Raises:
        HTTPException 401: If credentials are missing or rejected
    """
    try:
        return await resolver.resolve(credentials)
    except AuthenticationRequiredError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": _WWW_AUTHENTICATE},
        ) from e
    except AuthenticationInvalidError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": _WWW_AUTHENTICATE},
        ) from e


def require_admin(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    security_events: Annotated[SecurityEventSink, Depends(get_security_event_sink)],
) -> AuthContext:
    """Require the caller to hold the admin role.

    Raises:
        HTTPException 403: If the caller is not an admin
    """
    if not auth.is_admin:
        security_events.emit(
            SecurityEventType.PERMISSION_DENIED,
            SecuritySeverity.WARNING,
            "Admin role required",
            {
                "tenantId": auth.tenant_id,
                "userId": auth.user_id,
                "role": auth.role.value,
            },
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return auth
