"""Probes for shared infrastructure, plus the observation context they bind."""

from infrastructure.observability.probes import ConnectionProbe, DefaultConnectionProbe
from shared_kernel.observability_context import ObservationContext

__all__ = [
    "ConnectionProbe",
    "DefaultConnectionProbe",
    "ObservationContext",
]
