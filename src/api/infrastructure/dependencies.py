"""Shared infrastructure dependencies.

Provides ONLY process-wide infrastructure resources shared by every
bounded context. Does NOT import from bounded contexts to maintain DDD
boundaries.
"""

from functools import lru_cache

from infrastructure.settings import RuntimeSettings, get_runtime_settings
from shared_kernel.runtime_environment import RuntimeEnvironment
from shared_kernel.security_events import (
    SecurityEventSink,
    StructlogSecurityEventSink,
)


def build_runtime_environment(settings: RuntimeSettings) -> RuntimeEnvironment:
    return RuntimeEnvironment(
        environment=settings.environment,
        deployment_region=settings.deployment_region,
        production_regions=frozenset(settings.production_regions),
        local_development=settings.local_development,
    )


@lru_cache
def get_security_event_sink() -> SecurityEventSink:
    """Get the application-scoped security event sink (singleton).

    Records name the classified environment, so a deployment detected as
    production from its region alone is still labelled ``production``.
    """
    runtime = build_runtime_environment(get_runtime_settings())
    return StructlogSecurityEventSink(environment=runtime.name)
