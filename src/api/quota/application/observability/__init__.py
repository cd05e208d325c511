"""Domain-Oriented Observability for the quota application layer."""

from quota.application.observability.enforcer_probe import (
    DefaultQuotaEnforcerProbe,
    QuotaEnforcerProbe,
)
from quota.application.observability.tenant_quota_service_probe import (
    DefaultTenantQuotaServiceProbe,
    TenantQuotaServiceProbe,
)

__all__ = [
    "QuotaEnforcerProbe",
    "DefaultQuotaEnforcerProbe",
    "TenantQuotaServiceProbe",
    "DefaultTenantQuotaServiceProbe",
]
