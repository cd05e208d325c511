"""Quota application layer."""

from quota.application.enforcer import QuotaEnforcer
from quota.application.tenant_quota_service import TenantQuotaService

__all__ = [
    "QuotaEnforcer",
    "TenantQuotaService",
]
