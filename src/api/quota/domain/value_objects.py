"""Value objects for the quota domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum

from quota.domain.tiers import UNLIMITED, SubscriptionTier, TierLimits


class CounterField(StrEnum):
    """Counter columns on the tenant quota record."""

    CURRENT_PROJECTS = "current_projects"
    CURRENT_MONTHLY_EXPENSES = "current_monthly_expenses"
    CURRENT_USERS = "current_users"


class WindowField(StrEnum):
    """Window-start columns on the tenant quota record."""

    EXPENSE_COUNTER_WINDOW_START = "expense_counter_window_start"


class DenialReason(StrEnum):
    """Why a consume request was refused."""

    PROJECT_LIMIT_REACHED = "PROJECT_LIMIT_REACHED"
    EXPENSE_LIMIT_REACHED = "EXPENSE_LIMIT_REACHED"
    USER_LIMIT_REACHED = "USER_LIMIT_REACHED"


class ResourceKind(StrEnum):
    """Tenant resources subject to quota."""

    PROJECT = "project"
    EXPENSE = "expense"
    USER = "user"

    @property
    def counter(self) -> CounterField:
        """Counter column tracking this resource."""
        return _COUNTERS[self]

    @property
    def denial_reason(self) -> DenialReason:
        """Reason reported when this resource's limit is hit."""
        return _REASONS[self]

    @property
    def window(self) -> WindowField | None:
        """Window column for monthly-windowed resources, else None."""
        if self is ResourceKind.EXPENSE:
            return WindowField.EXPENSE_COUNTER_WINDOW_START
        return None

    def limit_in(self, limits: TierLimits) -> int:
        """Pick this resource's limit out of a tier's limits."""
        match self:
            case ResourceKind.PROJECT:
                return limits.max_projects
            case ResourceKind.EXPENSE:
                return limits.max_monthly_expenses
            case ResourceKind.USER:
                return limits.max_users


_COUNTERS = {
    ResourceKind.PROJECT: CounterField.CURRENT_PROJECTS,
    ResourceKind.EXPENSE: CounterField.CURRENT_MONTHLY_EXPENSES,
    ResourceKind.USER: CounterField.CURRENT_USERS,
}

_REASONS = {
    ResourceKind.PROJECT: DenialReason.PROJECT_LIMIT_REACHED,
    ResourceKind.EXPENSE: DenialReason.EXPENSE_LIMIT_REACHED,
    ResourceKind.USER: DenialReason.USER_LIMIT_REACHED,
}


class SubscriptionStatus(StrEnum):
    """Billing status of a tenant's subscription."""

    TRIAL = "trial"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"


class WriteOutcome(StrEnum):
    """Result of a conditional write."""

    SUCCESS = "success"
    REJECTED = "rejected"


def month_window_start(moment: datetime) -> datetime:
    """Return the first instant (UTC) of the calendar month containing ``moment``.

    Naive datetimes are taken to be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


@dataclass(frozen=True)
class TenantQuotaRecord:
    """Snapshot of a tenant's quota record.

    A snapshot is stale the moment it is read; it is only used to find the
    tenant's tier and for diagnostic usage figures, never to decide a
    counter write.
    """

    tenant_id: str
    subscription_tier: str
    subscription_status: SubscriptionStatus
    current_projects: int = 0
    current_monthly_expenses: int = 0
    current_users: int = 0
    expense_counter_window_start: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def counter_value(self, counter: CounterField) -> int:
        """Read a counter by field."""
        return getattr(self, counter.value)

    def window_is_stale(self, kind: ResourceKind, now: datetime) -> bool:
        """Whether a windowed counter still belongs to an earlier month.

        A counter with no window yet is stale. Counters without a window
        never are.
        """
        if kind.window is None:
            return False
        window_start = self.expense_counter_window_start
        if window_start is None:
            return True
        return month_window_start(window_start) < month_window_start(now)

    def window_is_ahead(self, kind: ResourceKind, now: datetime) -> bool:
        """Whether a windowed counter was already rolled past ``now``'s month.

        Happens when another replica's clock crossed a month boundary
        before this one's did.
        """
        if kind.window is None or self.expense_counter_window_start is None:
            return False
        return month_window_start(self.expense_counter_window_start) > (
            month_window_start(now)
        )

    def usage_of(self, kind: ResourceKind, now: datetime) -> int:
        """Current usage of a resource as of ``now``.

        The expense counter reads as zero once its window belongs to an
        earlier month. A window that is ahead of ``now`` keeps its count.
        """
        if self.window_is_stale(kind, now):
            return 0
        return self.counter_value(kind.counter)


@dataclass(frozen=True)
class QuotaDecision:
    """Outcome of a consume request.

    ``current_usage`` on a denial is a best-effort figure: it is derived
    from the snapshot read before the conditional write and the fact that
    the write was refused, not from a fresh read, and may lag concurrent
    writers. When the stored expense window is already ahead of the
    caller's clock (another replica rolled into the next month first),
    it is the snapshot's count for that newer window. It is None when
    the store could not be reached.
    """

    allowed: bool
    resource: ResourceKind
    reason: DenialReason | None = None
    current_usage: int | None = None
    limit: int | None = None
    suggested_tier: SubscriptionTier | None = None

    @classmethod
    def allow(cls, resource: ResourceKind) -> QuotaDecision:
        """Build an allow decision."""
        return cls(allowed=True, resource=resource)

    @classmethod
    def deny(
        cls,
        resource: ResourceKind,
        current_usage: int | None,
        limit: int | None,
        suggested_tier: SubscriptionTier | None,
    ) -> QuotaDecision:
        """Build a deny decision for a resource's limit."""
        return cls(
            allowed=False,
            resource=resource,
            reason=resource.denial_reason,
            current_usage=current_usage,
            limit=limit,
            suggested_tier=suggested_tier,
        )


@dataclass(frozen=True)
class ResourceUsage:
    """Usage of one resource against its limit."""

    current: int
    limit: int

    @property
    def unlimited(self) -> bool:
        return self.limit == UNLIMITED

    @property
    def percentage(self) -> int:
        """Share of the limit in use, 0-100. Always 0 when unlimited."""
        if self.unlimited:
            return 0
        if self.limit == 0:
            return 100
        return min(100, round(self.current * 100 / self.limit))


@dataclass(frozen=True)
class UsageSummary:
    """Read-only usage report for a tenant."""

    tenant_id: str
    tier: SubscriptionTier
    status: SubscriptionStatus
    projects: ResourceUsage
    expenses: ResourceUsage
    users: ResourceUsage
    features: tuple[str, ...] = ()
