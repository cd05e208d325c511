"""Ports for the identity bounded context."""

from identity.ports.exceptions import (
    AuthenticationInvalidError,
    AuthenticationRequiredError,
)
from identity.ports.verifier import TokenVerifier

__all__ = [
    "AuthenticationInvalidError",
    "AuthenticationRequiredError",
    "TokenVerifier",
]
