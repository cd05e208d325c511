"""Unit test fixtures with in-process collaborators."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from quota.domain import SubscriptionStatus, SubscriptionTier, TenantQuotaRecord
from quota.infrastructure import InMemoryQuotaStore
from shared_kernel.security_events import SecurityEventSink


class FrozenClock:
    """Callable clock that tests can move forward by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def security_events() -> MagicMock:
    """Security event sink that records calls."""
    return MagicMock(spec=SecurityEventSink)


@pytest.fixture
def memory_store() -> InMemoryQuotaStore:
    return InMemoryQuotaStore()


def make_record(
    tenant_id: str = "tenant-1",
    tier: SubscriptionTier | str = SubscriptionTier.TRIAL,
    **counters,
) -> TenantQuotaRecord:
    """Build a tenant record with the given tier and counter values."""
    return TenantQuotaRecord(
        tenant_id=tenant_id,
        subscription_tier=str(tier),
        subscription_status=SubscriptionStatus.ACTIVE,
        **counters,
    )
