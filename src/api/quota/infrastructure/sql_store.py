"""SQLAlchemy implementation of QuotaStore.

Every conditional primitive is one UPDATE whose WHERE clause carries the
precondition; the database evaluates and applies it atomically under the
row lock, and the affected row count tells whether it held. Each call
runs in its own short transaction so no lock is held across round trips.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TypeVar

from sqlalchemy import Update, case, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quota.domain.value_objects import (
    CounterField,
    SubscriptionStatus,
    TenantQuotaRecord,
    WindowField,
    WriteOutcome,
)
from quota.infrastructure.models import TenantQuotaModel
from quota.infrastructure.observability import (
    DefaultQuotaStoreProbe,
    QuotaStoreProbe,
)
from quota.ports.exceptions import StoreUnavailableError, TenantAlreadyExistsError
from quota.ports.store import QuotaStore

T = TypeVar("T")


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything stored is UTC.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_domain(model: TenantQuotaModel) -> TenantQuotaRecord:
    return TenantQuotaRecord(
        tenant_id=model.tenant_id,
        subscription_tier=model.subscription_tier,
        subscription_status=SubscriptionStatus(model.subscription_status),
        current_projects=model.current_projects,
        current_monthly_expenses=model.current_monthly_expenses,
        current_users=model.current_users,
        expense_counter_window_start=_as_utc(model.expense_counter_window_start),
        created_at=_as_utc(model.created_at),
        updated_at=_as_utc(model.updated_at),
    )


class SqlAlchemyQuotaStore(QuotaStore):
    """Quota store backed by the tenant_quotas table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout_seconds: float = 2.0,
        probe: QuotaStoreProbe | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            session_factory: Sessionmaker bound to the quota database engine
            timeout_seconds: Upper bound for one round trip, including
                waiting for a pooled connection
            probe: Optional domain probe for observability
        """
        self._session_factory = session_factory
        self._timeout_seconds = timeout_seconds
        self._probe = probe or DefaultQuotaStoreProbe()

    async def get_record(self, tenant_id: str) -> TenantQuotaRecord | None:
        async def work(session: AsyncSession) -> TenantQuotaRecord | None:
            stmt = select(TenantQuotaModel).where(
                TenantQuotaModel.tenant_id == tenant_id
            )
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()
            return _to_domain(model) if model is not None else None

        return await self._run(tenant_id, "get_record", work)

    async def create_record(self, record: TenantQuotaRecord) -> None:
        async def work(session: AsyncSession) -> None:
            session.add(
                TenantQuotaModel(
                    tenant_id=record.tenant_id,
                    subscription_tier=record.subscription_tier,
                    subscription_status=record.subscription_status.value,
                    current_projects=record.current_projects,
                    current_monthly_expenses=record.current_monthly_expenses,
                    current_users=record.current_users,
                    expense_counter_window_start=record.expense_counter_window_start,
                )
            )
            try:
                await session.flush()
            except IntegrityError as e:
                self._probe.duplicate_record(record.tenant_id)
                raise TenantAlreadyExistsError(
                    f"Quota record for tenant {record.tenant_id} already exists"
                ) from e

        await self._run(record.tenant_id, "create_record", work)
        self._probe.record_created(record.tenant_id)

    async def conditional_increment(
        self,
        tenant_id: str,
        counter: CounterField,
        delta: int,
        max_value: int,
        window: tuple[WindowField, datetime] | None = None,
    ) -> WriteOutcome:
        column = getattr(TenantQuotaModel, counter.value)
        conditions = [
            TenantQuotaModel.tenant_id == tenant_id,
            column + delta <= max_value,
        ]
        if window is not None:
            window_field, window_start = window
            conditions.append(
                getattr(TenantQuotaModel, window_field.value) == window_start
            )

        stmt = (
            update(TenantQuotaModel)
            .where(*conditions)
            .values({counter.value: column + delta})
        )
        return await self._conditional_update(tenant_id, "conditional_increment", stmt)

    async def conditional_reset(
        self,
        tenant_id: str,
        counter: CounterField,
        new_value: int,
        window_field: WindowField,
        window_start: datetime,
    ) -> WriteOutcome:
        window_column = getattr(TenantQuotaModel, window_field.value)
        stmt = (
            update(TenantQuotaModel)
            .where(
                TenantQuotaModel.tenant_id == tenant_id,
                or_(window_column.is_(None), window_column < window_start),
            )
            .values({counter.value: new_value, window_field.value: window_start})
        )
        return await self._conditional_update(tenant_id, "conditional_reset", stmt)

    async def clamped_decrement(
        self,
        tenant_id: str,
        counter: CounterField,
        delta: int,
    ) -> WriteOutcome:
        column = getattr(TenantQuotaModel, counter.value)
        stmt = (
            update(TenantQuotaModel)
            .where(TenantQuotaModel.tenant_id == tenant_id)
            .values({counter.value: case((column > delta, column - delta), else_=0)})
        )
        return await self._conditional_update(tenant_id, "clamped_decrement", stmt)

    async def update_subscription(
        self,
        tenant_id: str,
        tier: str,
        status: SubscriptionStatus,
    ) -> WriteOutcome:
        stmt = (
            update(TenantQuotaModel)
            .where(TenantQuotaModel.tenant_id == tenant_id)
            .values(subscription_tier=tier, subscription_status=status.value)
        )
        return await self._conditional_update(tenant_id, "update_subscription", stmt)

    async def _conditional_update(
        self, tenant_id: str, operation: str, stmt: Update
    ) -> WriteOutcome:
        stmt = stmt.execution_options(synchronize_session=False)

        async def work(session: AsyncSession) -> WriteOutcome:
            result = await session.execute(stmt)
            if result.rowcount == 1:
                return WriteOutcome.SUCCESS
            return WriteOutcome.REJECTED

        outcome = await self._run(tenant_id, operation, work)
        if outcome is WriteOutcome.REJECTED:
            self._probe.conditional_write_rejected(tenant_id, operation)
        return outcome

    async def _run(
        self,
        tenant_id: str,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        """Run ``work`` in its own transaction, bounded by the store timeout.

        Raises:
            StoreUnavailableError: On timeout or driver/transport failure.
                The outcome of the write is then unknown.
        """

        async def in_transaction() -> T:
            async with self._session_factory() as session:
                async with session.begin():
                    return await work(session)

        try:
            return await asyncio.wait_for(in_transaction(), self._timeout_seconds)
        except asyncio.TimeoutError as e:
            self._probe.operation_timed_out(
                tenant_id, operation, self._timeout_seconds
            )
            raise StoreUnavailableError(
                f"{operation} timed out after {self._timeout_seconds}s"
            ) from e
        except (SQLAlchemyError, OSError) as e:
            self._probe.operation_failed(tenant_id, operation, str(e))
            raise StoreUnavailableError(f"{operation} failed: {e}") from e
