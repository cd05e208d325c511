"""Identity application layer."""

from identity.application.resolver import AuthContextResolver

__all__ = ["AuthContextResolver"]
