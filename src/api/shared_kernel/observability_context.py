"""Request-scoped metadata that probes attach to every event they log.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Metadata bound to a probe with ``with_context``.

    Tenant and user IDs are not carried here. Probe events take them as
    explicit arguments, and a copy in the context would collide with those
    keyword arguments when it is splatted into a log call.

    Example:
        probe = DefaultQuotaEnforcerProbe().with_context(
            ObservationContext(request_id="req-123")
        )
    """

    request_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Flatten into log keyword arguments, omitting an unset request ID."""
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        result.update(self.extra)
        return result

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        return ObservationContext(
            request_id=self.request_id,
            extra={**self.extra, **kwargs},
        )
