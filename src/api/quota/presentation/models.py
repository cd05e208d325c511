"""Pydantic models for quota API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from quota.domain import (
    DenialReason,
    QuotaDecision,
    ResourceUsage,
    SubscriptionStatus,
    SubscriptionTier,
    UsageSummary,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuotaDenialResponse(_CamelModel):
    """Structured denial returned with a 403 when a quota is exhausted.

    ``current_usage`` is best-effort: it may lag concurrent requests and
    is null when the quota store could not be reached.
    """

    reason: DenialReason = Field(..., description="Which limit was reached")
    message: str = Field(..., description="Human-readable explanation")
    current_usage: int | None = Field(None, description="Approximate usage")
    limit: int | None = Field(None, description="Limit of the tenant's tier")
    suggested_tier: SubscriptionTier | None = Field(
        None, description="Next tier up, if any"
    )
    upgrade_url: str = Field(..., description="Where to upgrade")

    @classmethod
    def from_decision(
        cls, decision: QuotaDecision, upgrade_url: str
    ) -> QuotaDenialResponse:
        """Convert a deny decision to the API payload.

        Args:
            decision: A decision with ``allowed`` false
            upgrade_url: Upgrade link to include

        Returns:
            QuotaDenialResponse
        """
        assert decision.reason is not None
        if decision.limit is None:
            message = "Usage limits could not be checked; try again shortly"
        else:
            message = (
                f"Reached the limit of {decision.limit} "
                f"{decision.resource.value}s for this plan"
            )
        return cls(
            reason=decision.reason,
            message=message,
            current_usage=decision.current_usage,
            limit=decision.limit,
            suggested_tier=decision.suggested_tier,
            upgrade_url=upgrade_url,
        )


class ResourceUsageResponse(_CamelModel):
    """Usage of one resource."""

    current: int
    limit: int = Field(..., description="Limit, or -1 when unlimited")
    unlimited: bool
    percentage: int = Field(..., ge=0, le=100)

    @classmethod
    def from_domain(cls, usage: ResourceUsage) -> ResourceUsageResponse:
        return cls(
            current=usage.current,
            limit=usage.limit,
            unlimited=usage.unlimited,
            percentage=usage.percentage,
        )


class UsageSummaryResponse(_CamelModel):
    """Response model for a tenant's usage summary."""

    tenant_id: str
    tier: SubscriptionTier
    status: SubscriptionStatus
    projects: ResourceUsageResponse
    expenses: ResourceUsageResponse
    users: ResourceUsageResponse
    features: list[str] = Field(
        default_factory=list, description="Feature flags of the tenant's tier"
    )

    @classmethod
    def from_domain(cls, summary: UsageSummary) -> UsageSummaryResponse:
        """Convert a domain usage summary to the API response."""
        return cls(
            tenant_id=summary.tenant_id,
            tier=summary.tier,
            status=summary.status,
            projects=ResourceUsageResponse.from_domain(summary.projects),
            expenses=ResourceUsageResponse.from_domain(summary.expenses),
            users=ResourceUsageResponse.from_domain(summary.users),
            features=list(summary.features),
        )


class ChangeTierRequest(_CamelModel):
    """Request model for changing the caller's tenant tier."""

    tier: SubscriptionTier = Field(..., description="Target tier")
    status: SubscriptionStatus = Field(
        SubscriptionStatus.ACTIVE, description="Subscription status to record"
    )


class FeatureAccessResponse(_CamelModel):
    """Whether the caller's tier includes a feature."""

    feature: str
    enabled: bool
