"""Ports for the quota bounded context."""

from quota.ports.exceptions import (
    StoreUnavailableError,
    TenantAlreadyExistsError,
    TenantNotFoundError,
)
from quota.ports.store import QuotaStore

__all__ = [
    "QuotaStore",
    "StoreUnavailableError",
    "TenantAlreadyExistsError",
    "TenantNotFoundError",
]
