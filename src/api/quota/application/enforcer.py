"""Quota enforcement.

Answers "may this tenant create one more unit of resource X" and applies
the matching counter change in the same store round trip. The tenant
snapshot read at the start of a consume is only used to find the tier and
to phrase a denial; the decision itself is always the store's conditional
write.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

from quota.application.observability import (
    DefaultQuotaEnforcerProbe,
    QuotaEnforcerProbe,
)
from quota.domain.tiers import UNLIMITED, SubscriptionTier, TierCatalog
from quota.domain.value_objects import (
    QuotaDecision,
    ResourceKind,
    TenantQuotaRecord,
    WriteOutcome,
    month_window_start,
)
from quota.ports.exceptions import StoreUnavailableError, TenantNotFoundError
from quota.ports.store import QuotaStore
from shared_kernel.security_events import (
    SecurityEventSink,
    SecurityEventType,
    SecuritySeverity,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuotaEnforcer:
    """Consumes and releases tenant resource quota.

    Callers own the resource lifecycle: a successful ``try_consume`` that
    is followed by an aborted resource write must be undone with
    ``release``, and ``release`` must be called once per deleted resource.
    Neither obligation is checked here.
    """

    def __init__(
        self,
        store: QuotaStore,
        security_events: SecurityEventSink,
        catalog: TierCatalog | None = None,
        probe: QuotaEnforcerProbe | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the enforcer.

        Args:
            store: Quota store providing the conditional writes
            security_events: Sink receiving one event per denial
            catalog: Tier catalog (default: the built-in tiers)
            probe: Optional domain probe for observability
            clock: Source of "now" for the monthly expense window
        """
        self._store = store
        self._security_events = security_events
        self._catalog = catalog or TierCatalog()
        self._probe = probe or DefaultQuotaEnforcerProbe()
        self._clock = clock or _utc_now

    async def try_consume(
        self,
        tenant_id: str,
        resource: ResourceKind,
        delta: int = 1,
    ) -> QuotaDecision:
        """Try to take ``delta`` units of a resource from the tenant's quota.

        A store timeout or transport failure is reported as a denial with
        no usage figure.

        Raises:
            TenantNotFoundError: If the tenant has no quota record
            ValueError: If delta is not positive
        """
        if delta < 1:
            raise ValueError(f"delta must be positive, got {delta}")

        now = self._clock()

        try:
            record = await self._store.get_record(tenant_id)
        except StoreUnavailableError as e:
            return self._deny_unavailable(
                tenant_id, resource, None, None, "get_record", e
            )

        if record is None:
            self._probe.tenant_not_found(tenant_id)
            raise TenantNotFoundError(f"No quota record for tenant {tenant_id}")

        tier = self._catalog.resolve(record.subscription_tier)
        limit = resource.limit_in(self._catalog.limits_for(tier))

        if limit == UNLIMITED:
            self._probe.unlimited_quota_consumed(tenant_id, resource.value)
            return QuotaDecision.allow(resource)

        if delta > limit:
            return self._deny(tenant_id, resource, record, tier, limit, delta, now)

        try:
            if resource.window is None:
                outcome = await self._store.conditional_increment(
                    tenant_id, resource.counter, delta, limit
                )
            else:
                outcome = await self._consume_windowed(
                    tenant_id, resource, record, delta, limit, now
                )
        except StoreUnavailableError as e:
            return self._deny_unavailable(
                tenant_id, resource, tier, limit, "consume", e
            )

        if outcome is WriteOutcome.SUCCESS:
            self._probe.quota_consumed(tenant_id, resource.value, delta)
            return QuotaDecision.allow(resource)

        return self._deny(tenant_id, resource, record, tier, limit, delta, now)

    async def release(
        self,
        tenant_id: str,
        resource: ResourceKind,
        delta: int = 1,
    ) -> None:
        """Give ``delta`` units of a resource back, never going below zero.

        Raises:
            TenantNotFoundError: If the tenant has no quota record
            StoreUnavailableError: If the store could not be reached
            ValueError: If delta is not positive
        """
        if delta < 1:
            raise ValueError(f"delta must be positive, got {delta}")

        try:
            outcome = await self._store.clamped_decrement(
                tenant_id, resource.counter, delta
            )
        except StoreUnavailableError as e:
            self._probe.quota_store_unavailable(
                tenant_id, resource.value, "release", str(e)
            )
            raise

        if outcome is WriteOutcome.REJECTED:
            self._probe.tenant_not_found(tenant_id)
            raise TenantNotFoundError(f"No quota record for tenant {tenant_id}")

        self._probe.quota_released(tenant_id, resource.value, delta)

    async def _consume_windowed(
        self,
        tenant_id: str,
        resource: ResourceKind,
        record: TenantQuotaRecord,
        delta: int,
        limit: int,
        now: datetime,
    ) -> WriteOutcome:
        """Increment a monthly counter, rolling the window when it is stale.

        The increment only applies against the current month's window. If
        it is refused and the snapshot shows a window from an earlier month
        (or none), a reset guarded by "stored window is older" rolls the
        window; only one caller can win that reset per month. A caller that
        loses the reset retries the increment exactly once, against the
        window the winner installed. A refusal against a current or newer
        window is final.
        """
        assert resource.window is not None
        window_start = month_window_start(now)

        outcome = await self._store.conditional_increment(
            tenant_id,
            resource.counter,
            delta,
            limit,
            window=(resource.window, window_start),
        )
        if outcome is WriteOutcome.SUCCESS:
            return outcome
        if not record.window_is_stale(resource, now):
            return outcome

        reset = await self._store.conditional_reset(
            tenant_id,
            resource.counter,
            new_value=delta,
            window_field=resource.window,
            window_start=window_start,
        )
        if reset is WriteOutcome.SUCCESS:
            self._probe.expense_window_rolled(tenant_id, window_start)
            return reset

        self._probe.expense_window_contended(tenant_id)
        return await self._store.conditional_increment(
            tenant_id,
            resource.counter,
            delta,
            limit,
            window=(resource.window, window_start),
        )

    def _deny(
        self,
        tenant_id: str,
        resource: ResourceKind,
        record: TenantQuotaRecord,
        tier: SubscriptionTier,
        limit: int,
        delta: int,
        now: datetime,
    ) -> QuotaDecision:
        if record.window_is_ahead(resource, now):
            # The window was rolled under a later month than our clock
            # reads, so the refusal says nothing about this month's count.
            current_usage = record.usage_of(resource, now)
        else:
            # A refused increment means the counter was above limit - delta
            # at write time; the snapshot may be older than that.
            current_usage = max(record.usage_of(resource, now), limit - delta + 1)
        decision = QuotaDecision.deny(
            resource=resource,
            current_usage=current_usage,
            limit=limit,
            suggested_tier=self._catalog.suggested_upgrade(tier),
        )
        self._report_denial(tenant_id, tier, decision, store_unavailable=False)
        return decision

    def _deny_unavailable(
        self,
        tenant_id: str,
        resource: ResourceKind,
        tier: SubscriptionTier | None,
        limit: int | None,
        operation: str,
        error: StoreUnavailableError,
    ) -> QuotaDecision:
        self._probe.quota_store_unavailable(
            tenant_id, resource.value, operation, str(error)
        )
        decision = QuotaDecision.deny(
            resource=resource,
            current_usage=None,
            limit=limit,
            suggested_tier=(
                self._catalog.suggested_upgrade(tier) if tier is not None else None
            ),
        )
        self._report_denial(tenant_id, tier, decision, store_unavailable=True)
        return decision

    def _report_denial(
        self,
        tenant_id: str,
        tier: SubscriptionTier | None,
        decision: QuotaDecision,
        store_unavailable: bool,
    ) -> None:
        self._probe.quota_denied(
            tenant_id,
            decision.resource.value,
            decision.limit,
            decision.current_usage,
        )
        self._security_events.emit(
            SecurityEventType.QUOTA_LIMIT_ENFORCED,
            SecuritySeverity.INFO,
            f"Quota denied for {decision.resource.value}",
            {
                "tenantId": tenant_id,
                "resource": decision.resource.value,
                "reason": decision.reason.value if decision.reason else None,
                "tier": tier.value if tier is not None else None,
                "limit": decision.limit,
                "currentUsage": decision.current_usage,
                "storeUnavailable": store_unavailable,
            },
        )
