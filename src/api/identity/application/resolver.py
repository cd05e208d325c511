"""Auth context resolution.

Turns a request's credential material into an ``AuthContext`` or fails
the request. In production, a request without usable credentials is
always rejected and reported as a bypass attempt.
"""

from __future__ import annotations

from identity.application.observability import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from identity.domain.claims import (
    FEDERATED_IDENTITY_CLAIMS,
    SESSION_TOKEN_CLAIMS,
    ClaimMapping,
)
from identity.domain.schemes import (
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
from identity.ports.exceptions import (
    AuthenticationInvalidError,
    AuthenticationRequiredError,
)
from identity.ports.verifier import TokenVerifier
from shared_kernel.auth import InvalidTokenError
from shared_kernel.security_events import (
    SecurityEventSink,
    SecurityEventType,
    SecuritySeverity,
)


class AuthContextResolver:
    """Resolves the tenant, user and role behind a request.

    The scheme configuration is fixed at construction; nothing here reads
    ambient process state while handling a request.
    """

    def __init__(
        self,
        config: AuthSchemeConfig,
        security_events: SecurityEventSink,
        session_token_verifier: TokenVerifier | None = None,
        federated_identity_verifier: TokenVerifier | None = None,
        session_token_claims: ClaimMapping = SESSION_TOKEN_CLAIMS,
        federated_identity_claims: ClaimMapping = FEDERATED_IDENTITY_CLAIMS,
        probe: AuthenticationProbe | None = None,
    ):
        """Initialize the resolver.

        Args:
            config: Enabled schemes and runtime environment
            security_events: Sink for bypass attempts and auth failures
            session_token_verifier: Verifier for session tokens; required
                when that scheme is enabled
            federated_identity_verifier: Verifier for federated ID tokens;
                required when that scheme is enabled
            session_token_claims: Where session tokens carry tenant and role
            federated_identity_claims: Where federated tokens carry tenant and role
            probe: Optional domain probe for observability

        Raises:
            ValueError: If an enabled scheme has no verifier
        """
        if config.session_token_enabled and session_token_verifier is None:
            raise ValueError("Session token scheme is enabled without a verifier")
        if config.federated_identity_enabled and federated_identity_verifier is None:
            raise ValueError("Federated identity scheme is enabled without a verifier")

        self._config = config
        self._security_events = security_events
        self._session_token_verifier = session_token_verifier
        self._federated_identity_verifier = federated_identity_verifier
        self._session_token_claims = session_token_claims
        self._federated_identity_claims = federated_identity_claims
        self._probe = probe or DefaultAuthenticationProbe()

    @property
    def config(self) -> AuthSchemeConfig:
        return self._config

    async def resolve(self, credentials: RequestCredentials) -> AuthContext:
        """Resolve a request's auth context.

        Raises:
            AuthenticationRequiredError: If no usable credentials were presented
            AuthenticationInvalidError: If the selected credential is rejected
        """
        scheme = select_auth_scheme(credentials, self._config)

        match scheme:
            case SessionTokenScheme(token=token):
                assert self._session_token_verifier is not None
                return await self._authenticate(
                    token,
                    self._session_token_verifier,
                    self._session_token_claims,
                    AuthMethod.SESSION_TOKEN,
                )
            case FederatedIdentityScheme(token=token):
                assert self._federated_identity_verifier is not None
                return await self._authenticate(
                    token,
                    self._federated_identity_verifier,
                    self._federated_identity_claims,
                    AuthMethod.FEDERATED_IDENTITY,
                )
            case DevelopmentFallback():
                self._probe.development_identity_used()
                self._security_events.emit(
                    SecurityEventType.DEVELOPMENT_IDENTITY_USED,
                    SecuritySeverity.WARNING,
                    "No credential scheme configured, using development identity",
                    {
                        **self._config.describe(),
                        "tenantId": DEVELOPMENT_IDENTITY.tenant_id,
                        "userId": DEVELOPMENT_IDENTITY.user_id,
                    },
                )
                return DEVELOPMENT_IDENTITY
            case Unauthenticated(production=True, signals=signals):
                self._probe.authentication_required(production=True)
                self._security_events.emit(
                    SecurityEventType.AUTH_BYPASS_ATTEMPT,
                    SecuritySeverity.CRITICAL,
                    "Request without usable credentials rejected in production",
                    {
                        **self._config.describe(),
                        "environmentSignals": signals,
                        "sessionTokenPresented": credentials.session_token is not None,
                        "federatedTokenPresented": credentials.federated_token
                        is not None,
                    },
                )
                raise AuthenticationRequiredError("Authentication required")
            case Unauthenticated():
                self._probe.authentication_required(production=False)
                raise AuthenticationRequiredError("Authentication required")

    async def _authenticate(
        self,
        token: str,
        verifier: TokenVerifier,
        claim_mapping: ClaimMapping,
        auth_method: AuthMethod,
    ) -> AuthContext:
        try:
            claims = await verifier.validate_token(token)
        except InvalidTokenError as e:
            self._reject(auth_method, str(e))
            raise AuthenticationInvalidError(str(e)) from e

        tenant_id = claim_mapping.tenant_of(claims.raw_claims)
        if tenant_id is None:
            reason = f"Missing required claim: {claim_mapping.tenant_claim}"
            self._reject(auth_method, reason)
            raise AuthenticationInvalidError(reason)

        context = AuthContext(
            tenant_id=tenant_id,
            user_id=claims.sub,
            role=UserRole.from_claim(claim_mapping.role_of(claims.raw_claims)),
            auth_method=auth_method,
        )
        self._probe.user_authenticated(
            tenant_id=context.tenant_id,
            user_id=context.user_id,
            auth_method=auth_method.value,
        )
        return context

    def _reject(self, auth_method: AuthMethod, reason: str) -> None:
        self._probe.authentication_failed(auth_method=auth_method.value, reason=reason)
        self._security_events.emit(
            SecurityEventType.AUTHENTICATION_FAILED,
            SecuritySeverity.HIGH,
            "Credential rejected",
            {"authMethod": auth_method.value, "reason": reason},
        )
