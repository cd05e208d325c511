"""Async SQLAlchemy engine for tenant quota records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

if TYPE_CHECKING:
    from infrastructure.settings import DatabaseSettings

__all__ = [
    "APPLICATION_NAME",
    "build_async_url",
    "create_quota_engine",
]

# Shown in pg_stat_activity so quota traffic is identifiable on a shared server
APPLICATION_NAME = "quotagate"


def build_async_url(settings: DatabaseSettings) -> str:
    """Render an asyncpg URL with username and password percent-encoded."""
    return URL.create(
        drivername="postgresql+asyncpg",
        username=settings.username,
        password=settings.password.get_secret_value(),
        host=settings.host,
        port=settings.port,
        database=settings.database,
    ).render_as_string(hide_password=False)


def create_quota_engine(settings: DatabaseSettings) -> AsyncEngine:
    """Create the engine behind the quota store.

    Every quota primitive is one short statement in its own transaction, so
    the pool is a hard cap of ``pool_max_connections`` with no overflow.
    Stale connections are detected on checkout instead of failing a write.
    """
    return create_async_engine(
        build_async_url(settings),
        pool_size=settings.pool_max_connections,
        max_overflow=0,
        pool_pre_ping=True,
        connect_args={"server_settings": {"application_name": APPLICATION_NAME}},
    )
