"""Security event emission shared by all bounded contexts."""

from shared_kernel.security_events.sink import (
    SecurityEventSink,
    StructlogSecurityEventSink,
)
from shared_kernel.security_events.types import (
    SecurityEvent,
    SecurityEventType,
    SecuritySeverity,
)

__all__ = [
    "SecurityEvent",
    "SecurityEventSink",
    "SecurityEventType",
    "SecuritySeverity",
    "StructlogSecurityEventSink",
]
