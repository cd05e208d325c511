"""Tenant quota administration.

Onboarding, tier changes and usage reporting. None of these touch the
counters through a read-then-write; tier changes only rewrite the
subscription columns and usage reports never roll the expense window.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from quota.application.observability import (
    DefaultTenantQuotaServiceProbe,
    TenantQuotaServiceProbe,
)
from quota.domain.tiers import SubscriptionTier, TierCatalog
from quota.domain.value_objects import (
    ResourceKind,
    ResourceUsage,
    SubscriptionStatus,
    TenantQuotaRecord,
    UsageSummary,
    WriteOutcome,
)
from quota.ports.exceptions import TenantAlreadyExistsError, TenantNotFoundError
from quota.ports.store import QuotaStore


class TenantQuotaService:
    """Application service for tenant quota records."""

    def __init__(
        self,
        store: QuotaStore,
        catalog: TierCatalog | None = None,
        probe: TenantQuotaServiceProbe | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._store = store
        self._catalog = catalog or TierCatalog()
        self._probe = probe or DefaultTenantQuotaServiceProbe()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def onboard_tenant(self, tenant_id: str) -> TenantQuotaRecord:
        """Create a tenant's quota record on the trial tier with zero counters.

        Raises:
            TenantAlreadyExistsError: If the tenant already has a record
            ValueError: If tenant_id is empty
        """
        if not tenant_id or not tenant_id.strip():
            raise ValueError("tenant_id must not be empty")

        record = TenantQuotaRecord(
            tenant_id=tenant_id,
            subscription_tier=SubscriptionTier.TRIAL.value,
            subscription_status=SubscriptionStatus.TRIAL,
        )
        try:
            await self._store.create_record(record)
        except TenantAlreadyExistsError:
            self._probe.duplicate_tenant(tenant_id)
            raise

        self._probe.tenant_onboarded(tenant_id, record.subscription_tier)
        return record

    async def change_tier(
        self,
        tenant_id: str,
        tier: SubscriptionTier,
        status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
    ) -> None:
        """Move a tenant to another tier.

        Existing counters are kept as they are, so a downgrade can leave a
        tenant above its new limits; further consumes are then refused
        until releases bring it back under.

        Raises:
            TenantNotFoundError: If the tenant has no quota record
        """
        outcome = await self._store.update_subscription(tenant_id, tier.value, status)
        if outcome is WriteOutcome.REJECTED:
            self._probe.tenant_not_found(tenant_id)
            raise TenantNotFoundError(f"No quota record for tenant {tenant_id}")

        self._probe.tier_changed(tenant_id, tier.value, status.value)

    async def get_usage(self, tenant_id: str) -> UsageSummary:
        """Report a tenant's usage against its tier limits.

        Raises:
            TenantNotFoundError: If the tenant has no quota record
        """
        record = await self._store.get_record(tenant_id)
        if record is None:
            self._probe.tenant_not_found(tenant_id)
            raise TenantNotFoundError(f"No quota record for tenant {tenant_id}")

        now = self._clock()
        tier = self._catalog.resolve(record.subscription_tier)
        limits = self._catalog.limits_for(tier)

        def usage(kind: ResourceKind) -> ResourceUsage:
            return ResourceUsage(
                current=record.usage_of(kind, now), limit=kind.limit_in(limits)
            )

        self._probe.usage_retrieved(tenant_id)
        return UsageSummary(
            tenant_id=tenant_id,
            tier=tier,
            status=record.subscription_status,
            projects=usage(ResourceKind.PROJECT),
            expenses=usage(ResourceKind.EXPENSE),
            users=usage(ResourceKind.USER),
            features=tuple(sorted(self._catalog.definition_for(tier).features)),
        )

    async def has_feature(self, tenant_id: str, feature: str) -> bool:
        """Check whether a tenant's current tier includes a feature flag.

        Raises:
            TenantNotFoundError: If the tenant has no quota record
        """
        record = await self._store.get_record(tenant_id)
        if record is None:
            self._probe.tenant_not_found(tenant_id)
            raise TenantNotFoundError(f"No quota record for tenant {tenant_id}")
        return self._catalog.has_feature(record.subscription_tier, feature)
