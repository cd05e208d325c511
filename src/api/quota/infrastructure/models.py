"""SQLAlchemy ORM model for the tenant_quotas table.

One row per tenant. Counters are only ever changed by single conditional
UPDATE statements issued by the quota store.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class TenantQuotaModel(Base, TimestampMixin):
    """ORM model for tenant_quotas table."""

    __tablename__ = "tenant_quotas"
    __table_args__ = (
        CheckConstraint("current_projects >= 0", name="ck_tenant_quotas_projects"),
        CheckConstraint(
            "current_monthly_expenses >= 0", name="ck_tenant_quotas_expenses"
        ),
        CheckConstraint("current_users >= 0", name="ck_tenant_quotas_users"),
    )

    tenant_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    subscription_tier: Mapped[str] = mapped_column(String(32), nullable=False)
    subscription_status: Mapped[str] = mapped_column(String(32), nullable=False)
    current_projects: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_monthly_expenses: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    current_users: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expense_counter_window_start: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<TenantQuotaModel(tenant_id={self.tenant_id}, "
            f"tier={self.subscription_tier})>"
        )
