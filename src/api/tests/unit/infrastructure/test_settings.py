"""Unit tests for infrastructure settings."""

import pytest
from pydantic import ValidationError

from infrastructure.settings import (
    DatabaseSettings,
    FederatedIdentityAuthSettings,
    QuotaSettings,
    RuntimeSettings,
    SessionTokenAuthSettings,
)


class TestDatabaseSettingsPoolConfiguration:
    """Tests for connection pool configuration."""

    def test_default_pool_settings(self):
        """Should have sensible pool defaults."""
        settings = DatabaseSettings()
        assert settings.pool_min_connections >= 1
        assert settings.pool_max_connections >= settings.pool_min_connections

    def test_pool_max_must_be_greater_than_or_equal_to_min(self):
        """Should validate max >= min."""
        with pytest.raises(ValidationError, match="pool_max_connections"):
            DatabaseSettings(pool_min_connections=10, pool_max_connections=5)

    def test_pool_max_respects_upper_limit(self):
        """Pool max should not exceed reasonable limit."""
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=101)

    def test_connection_string_omits_password(self):
        settings = DatabaseSettings(username="svc", host="db", database="quotas")
        assert settings.connection_string == "postgresql://svc@db:5432/quotas"


class TestAuthSchemeSettings:
    """Tests for the two bearer credential schemes."""

    def test_both_schemes_disabled_by_default(self):
        assert SessionTokenAuthSettings().enabled is False
        assert FederatedIdentityAuthSettings().enabled is False

    def test_default_claim_names(self):
        session = SessionTokenAuthSettings()
        federated = FederatedIdentityAuthSettings()

        assert (session.tenant_claim, session.role_claim) == ("org_id", "org_role")
        assert (federated.tenant_claim, federated.role_claim) == (
            "custom:companyId",
            "custom:role",
        )

    def test_env_prefixes(self, monkeypatch):
        monkeypatch.setenv("QUOTAGATE_SESSION_AUTH_ENABLED", "true")
        monkeypatch.setenv("QUOTAGATE_SESSION_AUTH_ISSUER_URL", "https://issuer")
        monkeypatch.setenv("QUOTAGATE_FEDERATED_AUTH_AUDIENCE", "client-1")

        assert SessionTokenAuthSettings().enabled is True
        assert FederatedIdentityAuthSettings().audience == "client-1"

    def test_enabled_without_issuer_is_invalid(self):
        with pytest.raises(ValidationError, match="issuer_url"):
            FederatedIdentityAuthSettings(enabled=True)


class TestRuntimeSettings:
    def test_defaults(self):
        settings = RuntimeSettings()

        assert settings.environment is None
        assert settings.production_regions == ["us-east-1"]
        assert settings.local_development is False

    def test_production_regions_from_env(self, monkeypatch):
        monkeypatch.setenv(
            "QUOTAGATE_RUNTIME_PRODUCTION_REGIONS", '["eu-west-1", "us-east-1"]'
        )

        assert RuntimeSettings().production_regions == ["eu-west-1", "us-east-1"]


class TestQuotaSettings:
    def test_defaults(self):
        settings = QuotaSettings()

        assert settings.store_backend == "postgres"
        assert settings.store_timeout_seconds == 2.0
        assert settings.upgrade_url == "/pricing"

    def test_unknown_backend(self):
        with pytest.raises(ValidationError):
            QuotaSettings(store_backend="redis")

    @pytest.mark.parametrize("timeout", [0, -1, 31])
    def test_timeout_bounds(self, timeout):
        with pytest.raises(ValidationError):
            QuotaSettings(store_timeout_seconds=timeout)
