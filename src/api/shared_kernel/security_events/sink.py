"""Security event sink port and its structlog implementation."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any, Protocol

import structlog

from shared_kernel.security_events.types import (
    SecurityEvent,
    SecurityEventType,
    SecuritySeverity,
)


class SecurityEventSink(Protocol):
    """Best-effort emission of security events.

    Implementations must never raise: failing to record an event must not
    fail the request that triggered it.
    """

    def emit(
        self,
        event_type: SecurityEventType,
        severity: SecuritySeverity,
        message: str,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        """Record a security event."""
        ...


_LOG_METHOD_BY_SEVERITY = {
    SecuritySeverity.INFO: "info",
    SecuritySeverity.WARNING: "warning",
    SecuritySeverity.HIGH: "error",
    SecuritySeverity.CRITICAL: "critical",
}


class StructlogSecurityEventSink:
    """Writes security events as structured log records.

    Every record is logged as ``security_event`` so collectors can filter
    on one name. The envelope fields (``eventType``, ``severity``,
    ``message``, ``environment``, ``timestamp``) sit beside the
    event-specific context.
    """

    def __init__(
        self,
        environment: str,
        logger: structlog.stdlib.BoundLogger | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._environment = environment
        self._logger = logger or structlog.get_logger("security")
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def emit(
        self,
        event_type: SecurityEventType,
        severity: SecuritySeverity,
        message: str,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        """Record a security event, swallowing any logging failure."""
        try:
            event = SecurityEvent(
                event_type=event_type,
                severity=severity,
                message=message,
                environment=self._environment,
                timestamp=self._clock(),
                context=dict(context or {}),
            )
            log = getattr(self._logger, _LOG_METHOD_BY_SEVERITY[severity])
            log("security_event", **event.as_dict())
        except Exception:  # noqa: BLE001
            # emit never fails the request
            return
