"""Unit tests for AuthContextResolver."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from identity.application import AuthContextResolver
from identity.application.observability import AuthenticationProbe
from identity.domain import (
    DEVELOPMENT_IDENTITY,
    AuthMethod,
    AuthSchemeConfig,
    RequestCredentials,
    RuntimeEnvironment,
    UserRole,
)
from identity.ports import (
    AuthenticationInvalidError,
    AuthenticationRequiredError,
    TokenVerifier,
)
from shared_kernel.auth import InvalidTokenError, JWTValidator, TokenClaims
from shared_kernel.auth.observability import JWTValidatorProbe
from shared_kernel.security_events import SecurityEventType, SecuritySeverity
from tests.unit.token_support import SESSION_AUDIENCE, SESSION_ISSUER, sign_token, stub_issuer

PRODUCTION = RuntimeEnvironment(environment="production")
DEVELOPMENT = RuntimeEnvironment(environment="development")


def verifier_returning(**raw_claims) -> AsyncMock:
    verifier = AsyncMock(spec=TokenVerifier)
    verifier.validate_token.return_value = TokenClaims(
        sub=raw_claims.get("sub", "user-1"),
        preferred_username=None,
        raw_claims=raw_claims,
    )
    return verifier


def verifier_raising(message: str) -> AsyncMock:
    verifier = AsyncMock(spec=TokenVerifier)
    verifier.validate_token.side_effect = InvalidTokenError(message)
    return verifier


@pytest.fixture
def probe() -> MagicMock:
    return MagicMock(spec=AuthenticationProbe)


def both_schemes(
    runtime: RuntimeEnvironment = PRODUCTION,
) -> AuthSchemeConfig:
    return AuthSchemeConfig(
        session_token_enabled=True,
        federated_identity_enabled=True,
        runtime=runtime,
    )


def no_schemes(runtime: RuntimeEnvironment) -> AuthSchemeConfig:
    return AuthSchemeConfig(
        session_token_enabled=False,
        federated_identity_enabled=False,
        runtime=runtime,
    )


class TestConstruction:
    def test_enabled_scheme_requires_verifier(self, security_events: MagicMock):
        with pytest.raises(ValueError, match="Session token"):
            AuthContextResolver(
                config=both_schemes(),
                security_events=security_events,
                federated_identity_verifier=verifier_returning(),
            )


class TestSessionTokens:
    @pytest.mark.asyncio
    async def test_maps_tenant_user_and_role(
        self, security_events: MagicMock, probe: MagicMock
    ):
        resolver = AuthContextResolver(
            config=both_schemes(),
            security_events=security_events,
            session_token_verifier=verifier_returning(
                sub="user-7", org_id="org-1", org_role="admin"
            ),
            federated_identity_verifier=verifier_returning(),
            probe=probe,
        )

        context = await resolver.resolve(RequestCredentials(session_token="tok"))

        assert context.tenant_id == "org-1"
        assert context.user_id == "user-7"
        assert context.role is UserRole.ADMIN
        assert context.auth_method is AuthMethod.SESSION_TOKEN
        security_events.emit.assert_not_called()
        probe.user_authenticated.assert_called_once_with(
            tenant_id="org-1", user_id="user-7", auth_method="session_token"
        )

    @pytest.mark.asyncio
    async def test_session_token_takes_priority(self, security_events: MagicMock):
        session = verifier_returning(org_id="org-1")
        federated = verifier_returning(**{"custom:companyId": "comp-1"})
        resolver = AuthContextResolver(
            config=both_schemes(),
            security_events=security_events,
            session_token_verifier=session,
            federated_identity_verifier=federated,
        )

        context = await resolver.resolve(
            RequestCredentials(session_token="s", federated_token="f")
        )

        assert context.tenant_id == "org-1"
        session.validate_token.assert_awaited_once_with("s")
        federated.validate_token.assert_not_awaited()

    @pytest.mark.parametrize(
        ("claim", "role"),
        [
            ("manager", UserRole.MANAGER),
            ("Editor", UserRole.EDITOR),
            ("org:admin", UserRole.ADMIN),
            ("org:member", UserRole.EDITOR),
            ("member", UserRole.EDITOR),
            ("org:superuser", UserRole.VIEWER),
            ("user", UserRole.USER),
            ("superuser", UserRole.VIEWER),
            (None, UserRole.VIEWER),
        ],
    )
    @pytest.mark.asyncio
    async def test_role_mapping(self, security_events: MagicMock, claim, role):
        claims = {"org_id": "org-1"}
        if claim is not None:
            claims["org_role"] = claim
        resolver = AuthContextResolver(
            config=both_schemes(),
            security_events=security_events,
            session_token_verifier=verifier_returning(**claims),
            federated_identity_verifier=verifier_returning(),
        )

        context = await resolver.resolve(RequestCredentials(session_token="tok"))

        assert context.role is role


class TestFederatedIdentity:
    @pytest.mark.asyncio
    async def test_maps_namespaced_claims(self, security_events: MagicMock):
        resolver = AuthContextResolver(
            config=both_schemes(),
            security_events=security_events,
            session_token_verifier=verifier_returning(),
            federated_identity_verifier=verifier_returning(
                sub="cognito-user",
                **{"custom:companyId": "comp-1", "custom:role": "editor"},
            ),
        )

        context = await resolver.resolve(RequestCredentials(federated_token="id-token"))

        assert context.tenant_id == "comp-1"
        assert context.user_id == "cognito-user"
        assert context.role is UserRole.EDITOR
        assert context.auth_method is AuthMethod.FEDERATED_IDENTITY


class TestRejectedCredentials:
    @pytest.mark.asyncio
    async def test_invalid_token_is_reported(
        self, security_events: MagicMock, probe: MagicMock
    ):
        resolver = AuthContextResolver(
            config=both_schemes(),
            security_events=security_events,
            session_token_verifier=verifier_raising("Token expired"),
            federated_identity_verifier=verifier_returning(
                **{"custom:companyId": "comp-1"}
            ),
            probe=probe,
        )

        with pytest.raises(AuthenticationInvalidError, match="Token expired"):
            await resolver.resolve(
                RequestCredentials(session_token="old", federated_token="valid")
            )

        security_events.emit.assert_called_once()
        event_type, severity, _, context = security_events.emit.call_args.args
        assert event_type is SecurityEventType.AUTHENTICATION_FAILED
        assert severity is SecuritySeverity.HIGH
        assert context == {"authMethod": "session_token", "reason": "Token expired"}
        probe.authentication_failed.assert_called_once_with(
            auth_method="session_token", reason="Token expired"
        )

    @pytest.mark.asyncio
    async def test_invalid_token_never_falls_back_to_development(
        self, security_events: MagicMock
    ):
        # No scheme enabled means the token is ignored, not verified, so
        # use an enabled scheme in a non-production runtime.
        resolver = AuthContextResolver(
            config=AuthSchemeConfig(
                session_token_enabled=True,
                federated_identity_enabled=False,
                runtime=DEVELOPMENT,
            ),
            security_events=security_events,
            session_token_verifier=verifier_raising("Invalid signature"),
        )

        with pytest.raises(AuthenticationInvalidError):
            await resolver.resolve(RequestCredentials(session_token="forged"))

    @pytest.mark.asyncio
    async def test_missing_tenant_claim(self, security_events: MagicMock):
        resolver = AuthContextResolver(
            config=both_schemes(),
            security_events=security_events,
            session_token_verifier=verifier_returning(org_role="admin"),
            federated_identity_verifier=verifier_returning(),
        )

        with pytest.raises(AuthenticationInvalidError, match="org_id"):
            await resolver.resolve(RequestCredentials(session_token="tok"))

        event_type = security_events.emit.call_args.args[0]
        assert event_type is SecurityEventType.AUTHENTICATION_FAILED

    @pytest.mark.asyncio
    async def test_blank_tenant_claim(self, security_events: MagicMock):
        resolver = AuthContextResolver(
            config=both_schemes(),
            security_events=security_events,
            session_token_verifier=verifier_returning(org_id="   "),
            federated_identity_verifier=verifier_returning(),
        )

        with pytest.raises(AuthenticationInvalidError):
            await resolver.resolve(RequestCredentials(session_token="tok"))


class TestMissingCredentials:
    @pytest.mark.asyncio
    async def test_production_fails_closed_with_one_critical_event(
        self, security_events: MagicMock
    ):
        resolver = AuthContextResolver(
            config=no_schemes(PRODUCTION),
            security_events=security_events,
        )

        with pytest.raises(AuthenticationRequiredError):
            await resolver.resolve(RequestCredentials())

        security_events.emit.assert_called_once()
        event_type, severity, _, context = security_events.emit.call_args.args
        assert event_type is SecurityEventType.AUTH_BYPASS_ATTEMPT
        assert severity is SecuritySeverity.CRITICAL
        assert context["sessionTokenEnabled"] is False
        assert context["federatedIdentityEnabled"] is False
        assert context["environmentSignals"]["isProduction"] is True
        assert context["sessionTokenPresented"] is False

    @pytest.mark.asyncio
    async def test_production_with_schemes_but_no_token(
        self, security_events: MagicMock
    ):
        resolver = AuthContextResolver(
            config=both_schemes(PRODUCTION),
            security_events=security_events,
            session_token_verifier=verifier_returning(),
            federated_identity_verifier=verifier_returning(),
        )

        with pytest.raises(AuthenticationRequiredError):
            await resolver.resolve(RequestCredentials())

        assert (
            security_events.emit.call_args.args[0]
            is SecurityEventType.AUTH_BYPASS_ATTEMPT
        )

    @pytest.mark.asyncio
    async def test_production_region_counts_as_production(
        self, security_events: MagicMock
    ):
        resolver = AuthContextResolver(
            config=no_schemes(RuntimeEnvironment(deployment_region="us-east-1")),
            security_events=security_events,
        )

        with pytest.raises(AuthenticationRequiredError):
            await resolver.resolve(RequestCredentials())

        security_events.emit.assert_called_once()

    @pytest.mark.asyncio
    async def test_development_identity_without_critical_event(
        self, security_events: MagicMock, probe: MagicMock
    ):
        resolver = AuthContextResolver(
            config=no_schemes(DEVELOPMENT),
            security_events=security_events,
            probe=probe,
        )

        context = await resolver.resolve(RequestCredentials())

        assert context == DEVELOPMENT_IDENTITY
        assert context.tenant_id == "dev-tenant"
        assert context.user_id == "dev-user"
        assert context.role is UserRole.ADMIN
        assert context.auth_method is AuthMethod.DEVELOPMENT
        severities = [call.args[1] for call in security_events.emit.call_args_list]
        assert SecuritySeverity.CRITICAL not in severities
        assert (
            security_events.emit.call_args.args[0]
            is SecurityEventType.DEVELOPMENT_IDENTITY_USED
        )
        probe.development_identity_used.assert_called_once()

    @pytest.mark.asyncio
    async def test_enabled_scheme_outside_production_still_requires_token(
        self, security_events: MagicMock
    ):
        resolver = AuthContextResolver(
            config=both_schemes(DEVELOPMENT),
            security_events=security_events,
            session_token_verifier=verifier_returning(),
            federated_identity_verifier=verifier_returning(),
        )

        with pytest.raises(AuthenticationRequiredError):
            await resolver.resolve(RequestCredentials())

        security_events.emit.assert_not_called()


class TestWithJwtValidator:
    """Resolver wired to a real validator against a stubbed issuer."""

    @pytest.mark.asyncio
    async def test_signed_session_token(self, security_events: MagicMock):
        validator = JWTValidator(
            issuer_url=SESSION_ISSUER,
            audience=SESSION_AUDIENCE,
            probe=MagicMock(spec=JWTValidatorProbe),
        )
        resolver = AuthContextResolver(
            config=AuthSchemeConfig(
                session_token_enabled=True,
                federated_identity_enabled=False,
                runtime=PRODUCTION,
            ),
            security_events=security_events,
            session_token_verifier=validator,
        )
        token = sign_token(sub="alice", org_id="org-42", org_role="manager")

        with stub_issuer():
            context = await resolver.resolve(RequestCredentials(session_token=token))

        assert context.tenant_id == "org-42"
        assert context.user_id == "alice"
        assert context.role is UserRole.MANAGER
