"""Translate settings into identity domain configuration and verifiers."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from identity.domain.claims import ClaimMapping
from identity.domain.schemes import AuthSchemeConfig
from infrastructure.dependencies import build_runtime_environment
from shared_kernel.auth import DefaultJWTValidatorProbe, JWTValidator
from shared_kernel.observability_context import ObservationContext

if TYPE_CHECKING:
    from infrastructure.settings import (
        FederatedIdentityAuthSettings,
        RuntimeSettings,
        SessionTokenAuthSettings,
    )


def build_auth_scheme_config(
    session_token: SessionTokenAuthSettings,
    federated_identity: FederatedIdentityAuthSettings,
    runtime: RuntimeSettings,
) -> AuthSchemeConfig:
    """Build the scheme configuration the resolver is constructed with."""
    return AuthSchemeConfig(
        session_token_enabled=session_token.enabled,
        federated_identity_enabled=federated_identity.enabled,
        runtime=build_runtime_environment(runtime),
    )


def claim_mapping_for(
    settings: SessionTokenAuthSettings | FederatedIdentityAuthSettings,
) -> ClaimMapping:
    return ClaimMapping(
        tenant_claim=settings.tenant_claim,
        role_claim=settings.role_claim,
    )


def _build_validator(
    settings: SessionTokenAuthSettings | FederatedIdentityAuthSettings,
) -> JWTValidator:
    return JWTValidator(
        issuer_url=settings.issuer_url,
        audience=settings.audience,
        probe=DefaultJWTValidatorProbe().with_context(
            ObservationContext(extra={"issuer": settings.issuer_url})
        ),
        user_id_claim=settings.user_id_claim,
        jwks_cache_ttl=timedelta(hours=settings.jwks_cache_ttl_hours),
    )


def build_session_token_verifier(
    settings: SessionTokenAuthSettings,
) -> JWTValidator | None:
    """Build the session token verifier, or None when the scheme is disabled."""
    if not settings.enabled:
        return None
    return _build_validator(settings)


def build_federated_identity_verifier(
    settings: FederatedIdentityAuthSettings,
) -> JWTValidator | None:
    """Build the federated identity verifier, or None when the scheme is disabled."""
    if not settings.enabled:
        return None
    return _build_validator(settings)
