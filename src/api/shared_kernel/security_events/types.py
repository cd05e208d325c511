"""Security event value types.

Security events are audit records for authorization failures and quota
bypass attempts. They are consumed by an external log collector, so the
field names of the rendered record are a wire format.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class SecurityEventType(StrEnum):
    """Kinds of security-relevant events."""

    AUTH_BYPASS_ATTEMPT = "AUTH_BYPASS_ATTEMPT"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    DEVELOPMENT_IDENTITY_USED = "DEVELOPMENT_IDENTITY_USED"
    QUOTA_LIMIT_ENFORCED = "QUOTA_LIMIT_ENFORCED"
    PERMISSION_DENIED = "PERMISSION_DENIED"


class SecuritySeverity(StrEnum):
    """Severity levels understood by the alerting pipeline."""

    INFO = "info"
    WARNING = "warning"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class SecurityEvent:
    """A single security event as handed to the collector.

    Attributes:
        event_type: What happened.
        severity: How urgently someone should look at it.
        message: Human-readable summary.
        environment: Deployment environment name the event came from.
        timestamp: When the event was raised (UTC).
        context: Event-specific details.
    """

    event_type: SecurityEventType
    severity: SecuritySeverity
    message: str
    environment: str
    timestamp: datetime
    context: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Render the collector record.

        Context keys never override the fixed envelope fields.
        """
        return {
            **self.context,
            "eventType": self.event_type.value,
            "severity": self.severity.value,
            "message": self.message,
            "environment": self.environment,
            "timestamp": self.timestamp.isoformat(),
        }
