"""Protocol for quota enforcement observability.

Defines the interface for domain probes that capture the decisions and
store round trips of the quota consume/release path.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class QuotaEnforcerProbe(Protocol):
    """Domain probe for quota enforcement operations."""

    def quota_consumed(self, tenant_id: str, resource: str, delta: int) -> None:
        """Record that a conditional increment was applied."""
        ...

    def unlimited_quota_consumed(self, tenant_id: str, resource: str) -> None:
        """Record that an unlimited tier skipped the store."""
        ...

    def quota_denied(
        self,
        tenant_id: str,
        resource: str,
        limit: int | None,
        current_usage: int | None,
    ) -> None:
        """Record that a consume request was refused."""
        ...

    def expense_window_rolled(self, tenant_id: str, window_start: datetime) -> None:
        """Record that this caller rolled the monthly expense window."""
        ...

    def expense_window_contended(self, tenant_id: str) -> None:
        """Record that another caller rolled the window first."""
        ...

    def quota_store_unavailable(
        self, tenant_id: str, resource: str, operation: str, error: str
    ) -> None:
        """Record that the store timed out or failed during a quota operation."""
        ...

    def quota_released(self, tenant_id: str, resource: str, delta: int) -> None:
        """Record that a counter was decremented."""
        ...

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a quota operation named an unknown tenant."""
        ...

    def with_context(self, context: ObservationContext) -> QuotaEnforcerProbe: ...


class DefaultQuotaEnforcerProbe:
    """structlog-backed QuotaEnforcerProbe."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        return {} if self._context is None else self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultQuotaEnforcerProbe:
        return DefaultQuotaEnforcerProbe(logger=self._logger, context=context)

    def quota_consumed(self, tenant_id: str, resource: str, delta: int) -> None:
        self._logger.debug(
            "quota_consumed",
            tenant_id=tenant_id,
            resource=resource,
            delta=delta,
            **self._get_context_kwargs(),
        )

    def unlimited_quota_consumed(self, tenant_id: str, resource: str) -> None:
        self._logger.debug(
            "unlimited_quota_consumed",
            tenant_id=tenant_id,
            resource=resource,
            **self._get_context_kwargs(),
        )

    def quota_denied(
        self,
        tenant_id: str,
        resource: str,
        limit: int | None,
        current_usage: int | None,
    ) -> None:
        self._logger.info(
            "quota_denied",
            tenant_id=tenant_id,
            resource=resource,
            limit=limit,
            current_usage=current_usage,
            **self._get_context_kwargs(),
        )

    def expense_window_rolled(self, tenant_id: str, window_start: datetime) -> None:
        self._logger.info(
            "expense_window_rolled",
            tenant_id=tenant_id,
            window_start=window_start.isoformat(),
            **self._get_context_kwargs(),
        )

    def expense_window_contended(self, tenant_id: str) -> None:
        self._logger.debug(
            "expense_window_contended",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def quota_store_unavailable(
        self, tenant_id: str, resource: str, operation: str, error: str
    ) -> None:
        self._logger.error(
            "quota_store_unavailable",
            tenant_id=tenant_id,
            resource=resource,
            operation=operation,
            error=error,
            **self._get_context_kwargs(),
        )

    def quota_released(self, tenant_id: str, resource: str, delta: int) -> None:
        self._logger.debug(
            "quota_released",
            tenant_id=tenant_id,
            resource=resource,
            delta=delta,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_id: str) -> None:
        self._logger.warning(
            "quota_tenant_not_found",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )
