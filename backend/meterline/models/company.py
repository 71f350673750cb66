"""Company model.

The directory of companies the CRM serves. Metering only reads it to
resolve a company's tenant.
"""

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from meterline.models._base import Base


class Company(Base):
    """Company model."""

    __tablename__ = "company"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    tenant_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
