"""Quota database engine, session factory and ORM base."""

from infrastructure.database.models import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
]
