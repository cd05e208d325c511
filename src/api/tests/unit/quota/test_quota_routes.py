"""Unit tests for the quota HTTP surface.

Runs the application in-process over an ASGI transport with the quota
store, caller identity and security event sink overridden.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import Depends, FastAPI
from httpx import ASGITransport, AsyncClient

from identity.dependencies import get_auth_context
from identity.domain import AuthContext, AuthMethod, UserRole
from infrastructure.dependencies import get_security_event_sink
from main import app
from quota.dependencies import get_quota_store, require_quota
from quota.domain import QuotaDecision, ResourceKind, SubscriptionTier
from quota.infrastructure import InMemoryQuotaStore
from quota.ports import QuotaStore, StoreUnavailableError
from shared_kernel.security_events import SecurityEventType
from tests.unit.conftest import make_record


class Caller:
    """Mutable stand-in for the resolved auth context."""

    def __init__(self) -> None:
        self.context = AuthContext(
            tenant_id="tenant-1",
            user_id="user-1",
            role=UserRole.ADMIN,
            auth_method=AuthMethod.SESSION_TOKEN,
        )

    def as_role(self, role: UserRole) -> None:
        self.context = AuthContext(
            tenant_id=self.context.tenant_id,
            user_id=self.context.user_id,
            role=role,
            auth_method=self.context.auth_method,
        )


@pytest.fixture
def caller() -> Caller:
    return Caller()


def override(target: FastAPI, store: QuotaStore, caller: Caller, sink: MagicMock):
    target.dependency_overrides[get_quota_store] = lambda: store
    target.dependency_overrides[get_auth_context] = lambda: caller.context
    target.dependency_overrides[get_security_event_sink] = lambda: sink


@pytest_asyncio.fixture
async def client(
    memory_store: InMemoryQuotaStore, caller: Caller, security_events: MagicMock
) -> AsyncIterator[AsyncClient]:
    override(app, memory_store, caller, security_events)
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
    app.dependency_overrides.clear()


@pytest.fixture
def resource_app(
    memory_store: InMemoryQuotaStore, caller: Caller, security_events: MagicMock
) -> FastAPI:
    """App with a resource-creating endpoint guarded by quota."""
    resource_app = FastAPI()

    @resource_app.post("/projects", status_code=201)
    async def create_project(
        decision: Annotated[
            QuotaDecision, Depends(require_quota(ResourceKind.PROJECT))
        ],
    ) -> dict:
        return {"allowed": decision.allowed}

    override(resource_app, memory_store, caller, security_events)
    return resource_app


class TestUsage:
    @pytest.mark.asyncio
    async def test_reports_usage(
        self, client: AsyncClient, memory_store: InMemoryQuotaStore
    ) -> None:
        await memory_store.create_record(make_record(current_projects=2))

        response = await client.get("/quota/usage")

        assert response.status_code == 200
        body = response.json()
        assert body["tenantId"] == "tenant-1"
        assert body["tier"] == "trial"
        assert body["projects"] == {
            "current": 2,
            "limit": 3,
            "unlimited": False,
            "percentage": 67,
        }
        assert body["features"] == ["dashboard", "pdf_export"]

    @pytest.mark.asyncio
    async def test_unknown_tenant(self, client: AsyncClient) -> None:
        response = await client.get("/quota/usage")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_store_unavailable(self, client: AsyncClient) -> None:
        class DownStore(InMemoryQuotaStore):
            async def get_record(self, tenant_id):
                raise StoreUnavailableError("get_record timed out")

        app.dependency_overrides[get_quota_store] = lambda: DownStore()

        response = await client.get("/quota/usage")

        assert response.status_code == 503


class TestFeatureAccess:
    @pytest.mark.asyncio
    async def test_enabled_and_disabled(
        self, client: AsyncClient, memory_store: InMemoryQuotaStore
    ) -> None:
        await memory_store.create_record(make_record(tier=SubscriptionTier.ENTERPRISE))

        enabled = await client.get("/quota/features/auto_backups")
        missing = await client.get("/quota/features/teleportation")

        assert enabled.status_code == 200
        assert enabled.json() == {"feature": "auto_backups", "enabled": True}
        assert missing.json() == {"feature": "teleportation", "enabled": False}

    @pytest.mark.asyncio
    async def test_unknown_tenant(self, client: AsyncClient) -> None:
        response = await client.get("/quota/features/dashboard")

        assert response.status_code == 404


class TestOnboarding:
    @pytest.mark.asyncio
    async def test_admin_onboards_own_tenant(self, client: AsyncClient) -> None:
        response = await client.post("/quota/tenant")

        assert response.status_code == 201
        assert response.json()["tier"] == "trial"
        assert response.json()["status"] == "trial"

    @pytest.mark.asyncio
    async def test_second_onboarding_conflicts(self, client: AsyncClient) -> None:
        await client.post("/quota/tenant")

        response = await client.post("/quota/tenant")

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_non_admin_is_forbidden(
        self, client: AsyncClient, caller: Caller, security_events: MagicMock
    ) -> None:
        caller.as_role(UserRole.EDITOR)

        response = await client.post("/quota/tenant")

        assert response.status_code == 403
        assert (
            security_events.emit.call_args.args[0]
            is SecurityEventType.PERMISSION_DENIED
        )


class TestChangeTier:
    @pytest.mark.asyncio
    async def test_upgrade(
        self, client: AsyncClient, memory_store: InMemoryQuotaStore
    ) -> None:
        await memory_store.create_record(make_record())

        response = await client.put("/quota/tier", json={"tier": "enterprise"})

        assert response.status_code == 204
        record = await memory_store.get_record("tenant-1")
        assert record.subscription_tier == "enterprise"

    @pytest.mark.asyncio
    async def test_unknown_tier_is_rejected(self, client: AsyncClient) -> None:
        response = await client.put("/quota/tier", json={"tier": "platinum"})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_tenant(self, client: AsyncClient) -> None:
        response = await client.put("/quota/tier", json={"tier": "basic"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_viewer_cannot_change_tier(
        self, client: AsyncClient, caller: Caller, memory_store: InMemoryQuotaStore
    ) -> None:
        await memory_store.create_record(make_record())
        caller.as_role(UserRole.VIEWER)

        response = await client.put("/quota/tier", json={"tier": "enterprise"})

        assert response.status_code == 403
        record = await memory_store.get_record("tenant-1")
        assert record.subscription_tier == "trial"


class TestRequireQuota:
    @pytest.mark.asyncio
    async def test_allows_until_limit_then_returns_structured_denial(
        self, resource_app: FastAPI, memory_store: InMemoryQuotaStore
    ) -> None:
        await memory_store.create_record(make_record(current_projects=2))
        transport = ASGITransport(app=resource_app)

        async with AsyncClient(transport=transport, base_url="http://test") as c:
            allowed = await c.post("/projects")
            denied = await c.post("/projects")

        assert allowed.status_code == 201
        assert denied.status_code == 403
        assert denied.json()["detail"] == {
            "reason": "PROJECT_LIMIT_REACHED",
            "message": "Reached the limit of 3 projects for this plan",
            "currentUsage": 3,
            "limit": 3,
            "suggestedTier": SubscriptionTier.BASIC.value,
            "upgradeUrl": "/pricing",
        }

    @pytest.mark.asyncio
    async def test_unknown_tenant(self, resource_app: FastAPI) -> None:
        transport = ASGITransport(app=resource_app)

        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.post("/projects")

        assert response.status_code == 404
