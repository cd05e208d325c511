"""Domain-Oriented Observability for quota infrastructure."""

from quota.infrastructure.observability.store_probe import (
    DefaultQuotaStoreProbe,
    QuotaStoreProbe,
)

__all__ = [
    "QuotaStoreProbe",
    "DefaultQuotaStoreProbe",
]
