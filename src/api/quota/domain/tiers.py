"""Subscription tier catalog.

A static, process-wide table mapping each subscription tier to its
resource limits and feature flags. Lookups are pure and never fail:
anything that is not a known tier resolves to the most restrictive one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import Mapping

UNLIMITED = -1
"""Limit sentinel meaning "no limit for this resource"."""


class SubscriptionTier(StrEnum):
    """Subscription tiers, ordered from most to least restrictive."""

    TRIAL = "trial"
    BASIC = "basic"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


@dataclass(frozen=True)
class TierLimits:
    """Numeric resource limits of a tier.

    Any limit may be ``UNLIMITED``.
    """

    max_projects: int
    max_monthly_expenses: int
    max_users: int

    def __post_init__(self) -> None:
        for name in ("max_projects", "max_monthly_expenses", "max_users"):
            value = getattr(self, name)
            if value < 0 and value != UNLIMITED:
                raise ValueError(f"{name} must be >= 0 or UNLIMITED, got {value}")


@dataclass(frozen=True)
class TierDefinition:
    """Immutable definition of a subscription tier."""

    tier: SubscriptionTier
    display_name: str
    limits: TierLimits
    features: frozenset[str]


_BASE_FEATURES = frozenset({"dashboard", "pdf_export"})
_PROFESSIONAL_FEATURES = _BASE_FEATURES | {"advanced_pdf_export", "priority_support"}
_ENTERPRISE_FEATURES = _PROFESSIONAL_FEATURES | {"auto_backups"}

_DEFAULT_TIERS: tuple[TierDefinition, ...] = (
    TierDefinition(
        tier=SubscriptionTier.TRIAL,
        display_name="Trial",
        limits=TierLimits(max_projects=3, max_monthly_expenses=50, max_users=1),
        features=_BASE_FEATURES,
    ),
    TierDefinition(
        tier=SubscriptionTier.BASIC,
        display_name="Basic",
        limits=TierLimits(max_projects=3, max_monthly_expenses=50, max_users=1),
        features=_BASE_FEATURES,
    ),
    TierDefinition(
        tier=SubscriptionTier.PROFESSIONAL,
        display_name="Professional",
        limits=TierLimits(
            max_projects=10, max_monthly_expenses=UNLIMITED, max_users=3
        ),
        features=_PROFESSIONAL_FEATURES,
    ),
    TierDefinition(
        tier=SubscriptionTier.ENTERPRISE,
        display_name="Enterprise",
        limits=TierLimits(
            max_projects=UNLIMITED, max_monthly_expenses=UNLIMITED, max_users=10
        ),
        features=_ENTERPRISE_FEATURES,
    ),
)

_UPGRADE_PATH: Mapping[SubscriptionTier, SubscriptionTier | None] = MappingProxyType(
    {
        SubscriptionTier.TRIAL: SubscriptionTier.BASIC,
        SubscriptionTier.BASIC: SubscriptionTier.PROFESSIONAL,
        SubscriptionTier.PROFESSIONAL: SubscriptionTier.ENTERPRISE,
        SubscriptionTier.ENTERPRISE: None,
    }
)


class TierCatalog:
    """Lookup of tier definitions.

    Unknown tier identifiers (including ``None``) fall back to the trial
    tier, so a corrupt or missing tier never grants more than the most
    restrictive limits.
    """

    FALLBACK_TIER = SubscriptionTier.TRIAL

    def __init__(self, tiers: tuple[TierDefinition, ...] = _DEFAULT_TIERS):
        by_tier = {definition.tier: definition for definition in tiers}
        if self.FALLBACK_TIER not in by_tier:
            raise ValueError("Tier catalog must define the trial tier")
        self._tiers: Mapping[SubscriptionTier, TierDefinition] = MappingProxyType(
            by_tier
        )

    def resolve(self, tier_id: str | SubscriptionTier | None) -> SubscriptionTier:
        """Normalize a stored tier identifier to a known tier."""
        if tier_id is None:
            return self.FALLBACK_TIER
        try:
            tier = SubscriptionTier(str(tier_id).strip().lower())
        except ValueError:
            return self.FALLBACK_TIER
        return tier if tier in self._tiers else self.FALLBACK_TIER

    def definition_for(self, tier_id: str | SubscriptionTier | None) -> TierDefinition:
        """Return the full tier definition."""
        return self._tiers[self.resolve(tier_id)]

    def limits_for(self, tier_id: str | SubscriptionTier | None) -> TierLimits:
        """Return the numeric resource limits of a tier."""
        return self.definition_for(tier_id).limits

    def has_feature(self, tier_id: str | SubscriptionTier | None, feature: str) -> bool:
        """Check whether a tier includes a feature flag."""
        return feature in self.definition_for(tier_id).features

    def suggested_upgrade(
        self, tier_id: str | SubscriptionTier | None
    ) -> SubscriptionTier | None:
        """Return the next tier up, or None at the top of the ladder."""
        return _UPGRADE_PATH.get(self.resolve(tier_id))
