"""Quota domain layer: tier catalog and quota value objects."""

from quota.domain.tiers import (
    UNLIMITED,
    SubscriptionTier,
    TierCatalog,
    TierDefinition,
    TierLimits,
)
from quota.domain.value_objects import (
    CounterField,
    DenialReason,
    QuotaDecision,
    ResourceKind,
    ResourceUsage,
    SubscriptionStatus,
    TenantQuotaRecord,
    UsageSummary,
    WindowField,
    WriteOutcome,
    month_window_start,
)

__all__ = [
    "UNLIMITED",
    "CounterField",
    "DenialReason",
    "QuotaDecision",
    "ResourceKind",
    "ResourceUsage",
    "SubscriptionStatus",
    "SubscriptionTier",
    "TenantQuotaRecord",
    "TierCatalog",
    "TierDefinition",
    "TierLimits",
    "UsageSummary",
    "WindowField",
    "WriteOutcome",
    "month_window_start",
]
