"""Usage record model.

Append-only audit trail; one row per trackUsage call, admitted or not.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from meterline.models._base import CompanyBase


class UsageRecord(CompanyBase):
    """Usage record model."""

    __tablename__ = "usage_record"

    resource_type: Mapped[str] = mapped_column(String(64), nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # "metadata" is reserved on declarative classes
    record_metadata: Mapped[dict] = mapped_column("metadata", JSONB, nullable=False, default=dict)
    user_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    __table_args__ = (
        Index("idx_usage_record_history", "company_id", "resource_type", "timestamp"),
    )
