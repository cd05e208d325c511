"""Quota store port.

The store owns the only shared mutable state of the quota path: the
tenant quota record. Every counter mutation is a single conditional write
whose precondition the store evaluates and applies indivisibly, so callers
never read a counter and later write based on that read.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from quota.domain.value_objects import (
    CounterField,
    SubscriptionStatus,
    TenantQuotaRecord,
    WindowField,
    WriteOutcome,
)


@runtime_checkable
class QuotaStore(Protocol):
    """Atomic conditional-write access to tenant quota records.

    Every method may raise ``StoreUnavailableError`` on timeout or
    transport failure.
    """

    async def get_record(self, tenant_id: str) -> TenantQuotaRecord | None:
        """Read a snapshot of a tenant's record, or None if absent."""
        ...

    async def create_record(self, record: TenantQuotaRecord) -> None:
        """Insert a new tenant record.

        Raises:
            TenantAlreadyExistsError: If the tenant already has a record
        """
        ...

    async def conditional_increment(
        self,
        tenant_id: str,
        counter: CounterField,
        delta: int,
        max_value: int,
        window: tuple[WindowField, datetime] | None = None,
    ) -> WriteOutcome:
        """Add ``delta`` to ``counter`` if the result stays within ``max_value``.

        When ``window`` is given, the write additionally requires the
        stored window start in that field to equal the given instant.

        Returns:
            SUCCESS if applied; REJECTED if a condition failed or the
            tenant has no record. A rejected write leaves the record untouched.
        """
        ...

    async def conditional_reset(
        self,
        tenant_id: str,
        counter: CounterField,
        new_value: int,
        window_field: WindowField,
        window_start: datetime,
    ) -> WriteOutcome:
        """Set ``counter`` to ``new_value`` and roll the window to ``window_start``.

        Applies only if the stored window start is unset or earlier than
        ``window_start``, so at most one caller rolls any given window.
        """
        ...

    async def clamped_decrement(
        self,
        tenant_id: str,
        counter: CounterField,
        delta: int,
    ) -> WriteOutcome:
        """Subtract ``delta`` from ``counter``, flooring at zero.

        Returns REJECTED only when the tenant has no record.
        """
        ...

    async def update_subscription(
        self,
        tenant_id: str,
        tier: str,
        status: SubscriptionStatus,
    ) -> WriteOutcome:
        """Change a tenant's tier and status without touching counters.

        Returns REJECTED when the tenant has no record.
        """
        ...
