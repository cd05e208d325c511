"""Domain probe for quota store operations.

Following Domain-Oriented Observability patterns, this probe captures
events of the quota store's round trips that matter for operating it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class QuotaStoreProbe(Protocol):
    """Domain probe for quota store operations."""

    def record_created(self, tenant_id: str) -> None:
        """Record that a tenant quota record was inserted."""
        ...

    def duplicate_record(self, tenant_id: str) -> None:
        """Record that an insert hit an existing tenant record."""
        ...

    def conditional_write_rejected(self, tenant_id: str, operation: str) -> None:
        """Record that a conditional write's precondition did not hold."""
        ...

    def operation_timed_out(
        self, tenant_id: str, operation: str, timeout_seconds: float
    ) -> None:
        """Record that a store round trip exceeded its timeout."""
        ...

    def operation_failed(self, tenant_id: str, operation: str, error: str) -> None:
        """Record that a store round trip failed in the driver or transport."""
        ...

    def with_context(self, context: ObservationContext) -> QuotaStoreProbe: ...


class DefaultQuotaStoreProbe:
    """structlog-backed QuotaStoreProbe."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        return {} if self._context is None else self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultQuotaStoreProbe:
        return DefaultQuotaStoreProbe(logger=self._logger, context=context)

    def record_created(self, tenant_id: str) -> None:
        self._logger.info(
            "quota_record_created",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def duplicate_record(self, tenant_id: str) -> None:
        self._logger.warning(
            "quota_record_duplicate",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def conditional_write_rejected(self, tenant_id: str, operation: str) -> None:
        self._logger.debug(
            "quota_conditional_write_rejected",
            tenant_id=tenant_id,
            operation=operation,
            **self._get_context_kwargs(),
        )

    def operation_timed_out(
        self, tenant_id: str, operation: str, timeout_seconds: float
    ) -> None:
        self._logger.error(
            "quota_store_timeout",
            tenant_id=tenant_id,
            operation=operation,
            timeout_seconds=timeout_seconds,
            **self._get_context_kwargs(),
        )

    def operation_failed(self, tenant_id: str, operation: str, error: str) -> None:
        self._logger.error(
            "quota_store_operation_failed",
            tenant_id=tenant_id,
            operation=operation,
            error=error,
            **self._get_context_kwargs(),
        )
