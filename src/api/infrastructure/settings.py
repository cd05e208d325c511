"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        QUOTAGATE_DB_HOST: Database host (default: localhost)
        QUOTAGATE_DB_PORT: Database port (default: 5432)
        QUOTAGATE_DB_DATABASE: Database name (default: quotagate)
        QUOTAGATE_DB_USERNAME: Database user (default: quotagate)
        QUOTAGATE_DB_PASSWORD: Database password (required in production)
        QUOTAGATE_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        QUOTAGATE_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="QUOTAGATE_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="quotagate", description="Database name")
    username: str = Field(default="quotagate", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class _TokenSchemeSettings(BaseSettings):
    """Shared fields for the two bearer credential schemes."""

    enabled: bool = Field(default=False, description="Accept this scheme")
    issuer_url: str = Field(default="", description="OIDC issuer URL")
    audience: str = Field(default="", description="Expected audience claim")
    user_id_claim: str = Field(default="sub", description="Claim holding the user ID")
    jwks_cache_ttl_hours: int = Field(
        default=24,
        description="How long fetched JWKS keys are cached",
        ge=1,
    )

    @model_validator(mode="after")
    def validate_issuer_when_enabled(self) -> "_TokenSchemeSettings":
        """An enabled scheme must name the issuer it trusts."""
        if self.enabled and not self.issuer_url:
            raise ValueError("issuer_url must be set when the scheme is enabled")
        return self


class SessionTokenAuthSettings(_TokenSchemeSettings):
    """Session token (bearer JWT) authentication settings.

    Environment variables:
        QUOTAGATE_SESSION_AUTH_ENABLED: Accept session tokens (default: false)
        QUOTAGATE_SESSION_AUTH_ISSUER_URL: Token issuer URL
        QUOTAGATE_SESSION_AUTH_AUDIENCE: Expected audience
        QUOTAGATE_SESSION_AUTH_TENANT_CLAIM: Claim holding the tenant (default: org_id)
        QUOTAGATE_SESSION_AUTH_ROLE_CLAIM: Claim holding the role (default: org_role)
    """

    model_config = SettingsConfigDict(
        env_prefix="QUOTAGATE_SESSION_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    tenant_claim: str = Field(
        default="org_id", description="Claim holding the tenant ID"
    )
    role_claim: str = Field(default="org_role", description="Claim holding the role")


class FederatedIdentityAuthSettings(_TokenSchemeSettings):
    """Federated identity (ID token) authentication settings.

    Environment variables:
        QUOTAGATE_FEDERATED_AUTH_ENABLED: Accept federated ID tokens (default: false)
        QUOTAGATE_FEDERATED_AUTH_ISSUER_URL: Identity pool issuer URL
        QUOTAGATE_FEDERATED_AUTH_AUDIENCE: Expected audience (app client ID)
        QUOTAGATE_FEDERATED_AUTH_TENANT_CLAIM: Claim holding the tenant
        QUOTAGATE_FEDERATED_AUTH_ROLE_CLAIM: Claim holding the role
    """

    model_config = SettingsConfigDict(
        env_prefix="QUOTAGATE_FEDERATED_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    tenant_claim: str = Field(
        default="custom:companyId", description="Claim holding the tenant ID"
    )
    role_claim: str = Field(default="custom:role", description="Claim holding the role")


class RuntimeSettings(BaseSettings):
    """Signals used to decide whether this process runs in production.

    Environment variables:
        QUOTAGATE_RUNTIME_ENVIRONMENT: Environment name, e.g. production
        QUOTAGATE_RUNTIME_DEPLOYMENT_REGION: Region the process is deployed in
        QUOTAGATE_RUNTIME_PRODUCTION_REGIONS: JSON list of production regions
        QUOTAGATE_RUNTIME_LOCAL_DEVELOPMENT: Local development override
    """

    model_config = SettingsConfigDict(
        env_prefix="QUOTAGATE_RUNTIME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str | None = Field(default=None, description="Environment name")
    deployment_region: str | None = Field(
        default=None, description="Deployment region"
    )
    production_regions: list[str] = Field(
        default_factory=lambda: ["us-east-1"],
        description="Regions that count as production deployments",
    )
    local_development: bool = Field(
        default=False,
        description="Explicit local development override",
    )


class QuotaSettings(BaseSettings):
    """Quota store settings.

    Environment variables:
        QUOTAGATE_QUOTA_STORE_BACKEND: postgres or memory (default: postgres)
        QUOTAGATE_QUOTA_STORE_TIMEOUT_SECONDS: Per-operation timeout (default: 2.0)
        QUOTAGATE_QUOTA_UPGRADE_URL: Upgrade link in denials (default: /pricing)
    """

    model_config = SettingsConfigDict(
        env_prefix="QUOTAGATE_QUOTA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    store_backend: Literal["postgres", "memory"] = Field(
        default="postgres",
        description="Backing store for tenant quota records",
    )
    store_timeout_seconds: float = Field(
        default=2.0,
        description="Timeout for a single conditional write round trip",
        gt=0,
        le=30,
    )
    upgrade_url: str = Field(
        default="/pricing",
        description="Where quota denials point clients for upgrading",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="Quotagate API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_session_token_auth_settings() -> SessionTokenAuthSettings:
    """Get cached session token authentication settings."""
    return SessionTokenAuthSettings()


@lru_cache
def get_federated_identity_auth_settings() -> FederatedIdentityAuthSettings:
    """Get cached federated identity authentication settings."""
    return FederatedIdentityAuthSettings()


@lru_cache
def get_runtime_settings() -> RuntimeSettings:
    """Get cached runtime environment settings."""
    return RuntimeSettings()


@lru_cache
def get_quota_settings() -> QuotaSettings:
    """Get cached quota store settings."""
    return QuotaSettings()
