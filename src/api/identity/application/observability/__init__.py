"""Domain-Oriented Observability for the identity application layer."""

from identity.application.observability.authentication_probe import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)

__all__ = [
    "AuthenticationProbe",
    "DefaultAuthenticationProbe",
]
