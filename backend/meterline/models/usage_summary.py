"""Usage summary model.

Derived, one row per company; fully rewritten after every ledger mutation.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from meterline.models._base import CompanyBase


class UsageSummary(CompanyBase):
    """Usage summary model."""

    __tablename__ = "usage_summary"

    period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    period_unit: Mapped[str] = mapped_column(String(16), nullable=False)
    # resource_type -> {current_usage, limit, percent_used, remaining_usage, overage_usage, status}
    resources: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    total_usage_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (UniqueConstraint("company_id", name="uq_usage_summary_company"),)
