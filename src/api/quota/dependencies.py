"""FastAPI dependencies for the quota bounded context."""

from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status

from identity.dependencies import get_auth_context
from identity.domain import AuthContext
from infrastructure.database.dependencies import get_session_factory
from infrastructure.dependencies import get_security_event_sink
from infrastructure.settings import get_quota_settings
from quota.application import QuotaEnforcer, TenantQuotaService
from quota.domain import QuotaDecision, ResourceKind, TierCatalog
from quota.infrastructure import InMemoryQuotaStore, SqlAlchemyQuotaStore
from quota.ports import QuotaStore, TenantNotFoundError
from quota.presentation.models import QuotaDenialResponse
from shared_kernel.security_events import SecurityEventSink


@lru_cache
def get_quota_store() -> QuotaStore:
    """Get the application-scoped quota store (singleton).

    The in-memory backend only holds state for the life of the process
    and is meant for local development.
    """
    settings = get_quota_settings()
    if settings.store_backend == "memory":
        return InMemoryQuotaStore()
    return SqlAlchemyQuotaStore(
        session_factory=get_session_factory(),
        timeout_seconds=settings.store_timeout_seconds,
    )


@lru_cache
def get_tier_catalog() -> TierCatalog:
    """Get the tier catalog (singleton)."""
    return TierCatalog()


def get_quota_enforcer(
    store: Annotated[QuotaStore, Depends(get_quota_store)],
    catalog: Annotated[TierCatalog, Depends(get_tier_catalog)],
    security_events: Annotated[SecurityEventSink, Depends(get_security_event_sink)],
) -> QuotaEnforcer:
    """Get QuotaEnforcer instance."""
    return QuotaEnforcer(
        store=store,
        security_events=security_events,
        catalog=catalog,
    )


def get_tenant_quota_service(
    store: Annotated[QuotaStore, Depends(get_quota_store)],
    catalog: Annotated[TierCatalog, Depends(get_tier_catalog)],
) -> TenantQuotaService:
    """Get TenantQuotaService instance."""
    return TenantQuotaService(store=store, catalog=catalog)


def require_quota(
    resource: ResourceKind,
) -> Callable[..., Awaitable[QuotaDecision]]:
    """Build a dependency consuming one unit of ``resource`` for the caller's tenant.

    Business handlers declare it on the endpoint that creates the resource.
    A handler that then fails to persist the resource must call
    ``QuotaEnforcer.release`` itself.

    Example:
        @router.post("/projects")
        async def create_project(
            _: Annotated[QuotaDecision, Depends(require_quota(ResourceKind.PROJECT))],
        ): ...
    """

    async def consume_quota(
        auth: Annotated[AuthContext, Depends(get_auth_context)],
        enforcer: Annotated[QuotaEnforcer, Depends(get_quota_enforcer)],
    ) -> QuotaDecision:
        try:
            decision = await enforcer.try_consume(auth.tenant_id, resource)
        except TenantNotFoundError as e:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Tenant {auth.tenant_id} not found",
            ) from e

        if not decision.allowed:
            denial = QuotaDenialResponse.from_decision(
                decision, upgrade_url=get_quota_settings().upgrade_url
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=denial.model_dump(mode="json", by_alias=True),
            )
        return decision

    return consume_quota
