"""Protocol for tenant quota service observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantQuotaServiceProbe(Protocol):
    """Domain probe for tenant quota administration."""

    def tenant_onboarded(self, tenant_id: str, tier: str) -> None:
        """Record that a tenant quota record was created."""
        ...

    def duplicate_tenant(self, tenant_id: str) -> None:
        """Record that onboarding found an existing record."""
        ...

    def tier_changed(self, tenant_id: str, tier: str, status: str) -> None:
        """Record that a tenant's subscription tier was changed."""
        ...

    def usage_retrieved(self, tenant_id: str) -> None:
        """Record that a usage summary was read."""
        ...

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a tenant was not found."""
        ...

    def with_context(self, context: ObservationContext) -> TenantQuotaServiceProbe: ...


class DefaultTenantQuotaServiceProbe:
    """structlog-backed TenantQuotaServiceProbe."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        return {} if self._context is None else self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultTenantQuotaServiceProbe:
        return DefaultTenantQuotaServiceProbe(logger=self._logger, context=context)

    def tenant_onboarded(self, tenant_id: str, tier: str) -> None:
        self._logger.info(
            "tenant_onboarded",
            tenant_id=tenant_id,
            tier=tier,
            **self._get_context_kwargs(),
        )

    def duplicate_tenant(self, tenant_id: str) -> None:
        self._logger.warning(
            "duplicate_tenant",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tier_changed(self, tenant_id: str, tier: str, status: str) -> None:
        self._logger.info(
            "tenant_tier_changed",
            tenant_id=tenant_id,
            tier=tier,
            status=status,
            **self._get_context_kwargs(),
        )

    def usage_retrieved(self, tenant_id: str) -> None:
        self._logger.debug(
            "tenant_usage_retrieved",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_id: str) -> None:
        self._logger.debug(
            "tenant_not_found",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )
