"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from infrastructure.database.dependencies import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.settings import get_settings
from infrastructure.version import __version__
from quota.presentation import routes as quota_routes


@asynccontextmanager
async def quotagate_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Structured logging configuration
    - Database engine lifecycle (created lazily, disposed on shutdown)
    """
    configure_logging(debug=get_settings().debug)

    yield

    await close_database_connections()


app = FastAPI(
    title=get_settings().app_name,
    description="Tenant authentication context and subscription quota enforcement",
    version=__version__,
    lifespan=quotagate_lifespan,
)

# Include Quota bounded context routes
app.include_router(quota_routes.router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok", "version": __version__}
