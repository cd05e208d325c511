"""Quota infrastructure: persistence adapters for the quota store port."""

from quota.infrastructure.memory_store import InMemoryQuotaStore
from quota.infrastructure.models import TenantQuotaModel
from quota.infrastructure.sql_store import SqlAlchemyQuotaStore

__all__ = [
    "InMemoryQuotaStore",
    "SqlAlchemyQuotaStore",
    "TenantQuotaModel",
]
