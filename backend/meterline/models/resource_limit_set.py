"""Resource limit set model.

One row per company holding its full list of resource limits. The list is
replaced as a whole on every reconfiguration.
"""

from sqlalchemy import UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from meterline.models._base import CompanyBase


class ResourceLimitSet(CompanyBase):
    """Resource limit set model."""

    __tablename__ = "resource_limit_set"

    # list of ResourceLimit dicts, in configuration order
    limits: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)

    __table_args__ = (UniqueConstraint("company_id", name="uq_resource_limit_set_company"),)
