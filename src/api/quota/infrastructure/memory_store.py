"""In-process implementation of QuotaStore.

Used for local development and tests. A single asyncio lock serializes
every primitive, which gives the same all-or-nothing semantics as the
database's conditional UPDATE within one event loop. Each primitive
yields to the loop before taking the lock so concurrent callers really
interleave.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timezone

from quota.domain.value_objects import (
    CounterField,
    SubscriptionStatus,
    TenantQuotaRecord,
    WindowField,
    WriteOutcome,
)
from quota.ports.exceptions import TenantAlreadyExistsError
from quota.ports.store import QuotaStore


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class InMemoryQuotaStore(QuotaStore):
    """Quota store holding records in a dict."""

    def __init__(self) -> None:
        self._records: dict[str, TenantQuotaRecord] = {}
        self._lock = asyncio.Lock()

    async def get_record(self, tenant_id: str) -> TenantQuotaRecord | None:
        await asyncio.sleep(0)
        async with self._lock:
            return self._records.get(tenant_id)

    async def create_record(self, record: TenantQuotaRecord) -> None:
        await asyncio.sleep(0)
        async with self._lock:
            if record.tenant_id in self._records:
                raise TenantAlreadyExistsError(
                    f"Quota record for tenant {record.tenant_id} already exists"
                )
            now = datetime.now(timezone.utc)
            self._records[record.tenant_id] = replace(
                record,
                created_at=record.created_at or now,
                updated_at=record.updated_at or now,
            )

    async def conditional_increment(
        self,
        tenant_id: str,
        counter: CounterField,
        delta: int,
        max_value: int,
        window: tuple[WindowField, datetime] | None = None,
    ) -> WriteOutcome:
        await asyncio.sleep(0)
        async with self._lock:
            record = self._records.get(tenant_id)
            if record is None:
                return WriteOutcome.REJECTED
            value = record.counter_value(counter)
            if value + delta > max_value:
                return WriteOutcome.REJECTED
            if window is not None:
                window_field, window_start = window
                stored = getattr(record, window_field.value)
                if stored is None or _utc(stored) != _utc(window_start):
                    return WriteOutcome.REJECTED
            self._put(record, **{counter.value: value + delta})
            return WriteOutcome.SUCCESS

    async def conditional_reset(
        self,
        tenant_id: str,
        counter: CounterField,
        new_value: int,
        window_field: WindowField,
        window_start: datetime,
    ) -> WriteOutcome:
        await asyncio.sleep(0)
        async with self._lock:
            record = self._records.get(tenant_id)
            if record is None:
                return WriteOutcome.REJECTED
            stored = getattr(record, window_field.value)
            if stored is not None and _utc(stored) >= _utc(window_start):
                return WriteOutcome.REJECTED
            self._put(
                record,
                **{counter.value: new_value, window_field.value: _utc(window_start)},
            )
            return WriteOutcome.SUCCESS

    async def clamped_decrement(
        self,
        tenant_id: str,
        counter: CounterField,
        delta: int,
    ) -> WriteOutcome:
        await asyncio.sleep(0)
        async with self._lock:
            record = self._records.get(tenant_id)
            if record is None:
                return WriteOutcome.REJECTED
            value = record.counter_value(counter)
            self._put(record, **{counter.value: max(0, value - delta)})
            return WriteOutcome.SUCCESS

    async def update_subscription(
        self,
        tenant_id: str,
        tier: str,
        status: SubscriptionStatus,
    ) -> WriteOutcome:
        await asyncio.sleep(0)
        async with self._lock:
            record = self._records.get(tenant_id)
            if record is None:
                return WriteOutcome.REJECTED
            self._put(record, subscription_tier=tier, subscription_status=status)
            return WriteOutcome.SUCCESS

    def _put(self, record: TenantQuotaRecord, **changes) -> None:
        self._records[record.tenant_id] = replace(
            record, updated_at=datetime.now(timezone.utc), **changes
        )
