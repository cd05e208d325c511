"""Where the process runs, and whether that counts as production."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RuntimeEnvironment:
    """Signals describing where the process runs.

    Production is detected from several independent signals so that a
    single missing variable cannot downgrade a production deployment:
    an explicit environment name of ``production``, or a deployment in a
    production region without an explicit local-development override.
    """

    environment: str | None = None
    deployment_region: str | None = None
    production_regions: frozenset[str] = frozenset({"us-east-1"})
    local_development: bool = False

    @property
    def is_production(self) -> bool:
        if (self.environment or "").strip().lower() == "production":
            return True
        region = (self.deployment_region or "").strip().lower()
        in_production_region = region in {r.lower() for r in self.production_regions}
        return in_production_region and not self.local_development

    @property
    def name(self) -> str:
        """Environment name for audit records."""
        if self.environment:
            return self.environment
        return "production" if self.is_production else "development"

    def signals(self) -> dict[str, Any]:
        """The raw signals behind the classification, for security events."""
        return {
            "environment": self.environment,
            "deploymentRegion": self.deployment_region,
            "localDevelopment": self.local_development,
            "isProduction": self.is_production,
        }
