"""Usage domain protocols.

UsageLedgerProtocol: the write side, deciding admission per tracked call.
UsageMeteringServiceProtocol: every public metering operation; the only
thing the usage endpoints need injected.
"""

from datetime import datetime
from typing import Any, Optional, Protocol, runtime_checkable

from sqlalchemy.ext.asyncio import AsyncSession

from meterline.domains.usage.types import MeteringStatus, ResourceType, TimeUnit
from meterline.schemas.resource_limit import ResourceLimit
from meterline.schemas.resource_usage import ResourceUsage
from meterline.schemas.usage_record import UsageRecord
from meterline.schemas.usage_report import UsageReport
from meterline.schemas.usage_summary import UsageSummary


@runtime_checkable
class UsageLedgerProtocol(Protocol):
    """Per-(company, resource) counters with limit enforcement."""

    async def track_usage(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: ResourceType,
        amount: float = 1,
        metadata: Optional[dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> bool:
        """Report consumption; returns True if admitted."""
        ...

    async def set_metering_status(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: ResourceType,
        status: MeteringStatus,
    ) -> ResourceUsage:
        """Change the status of a ledger entry."""
        ...

    async def reset_usage(
        self, db: AsyncSession, company_id: str, resource_type: ResourceType
    ) -> ResourceUsage:
        """Zero the counter of a ledger entry."""
        ...


@runtime_checkable
class UsageMeteringServiceProtocol(Protocol):
    """Public usage metering interface."""

    async def configure_resource_limits(
        self,
        db: AsyncSession,
        company_id: str,
        limits: list[ResourceLimit],
        tenant_id: Optional[str] = None,
    ) -> list[ResourceLimit]:
        """Replace the limit set of a company."""
        ...

    async def get_resource_limits(self, db: AsyncSession, company_id: str) -> list[ResourceLimit]:
        """Return the configured limits of a company."""
        ...

    async def track_usage(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: ResourceType,
        amount: float = 1,
        metadata: Optional[dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> bool:
        """Report consumption; returns True if admitted."""
        ...

    async def get_resource_usage(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: Optional[ResourceType] = None,
    ) -> list[ResourceUsage]:
        """Return one or all ledger entries of a company."""
        ...

    async def get_usage_history(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: ResourceType,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[UsageRecord]:
        """Return audit records of one resource, newest first."""
        ...

    async def get_usage_summary(self, db: AsyncSession, company_id: str) -> Optional[UsageSummary]:
        """Return the usage summary of a company."""
        ...

    async def set_metering_status(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: ResourceType,
        status: MeteringStatus,
    ) -> ResourceUsage:
        """Change the status of a ledger entry."""
        ...

    async def reset_usage(
        self, db: AsyncSession, company_id: str, resource_type: ResourceType
    ) -> ResourceUsage:
        """Zero the counter of a ledger entry."""
        ...

    async def get_usage_report(
        self,
        company_id: str,
        period: TimeUnit,
        start_date: datetime,
        end_date: datetime,
    ) -> UsageReport:
        """Generate a usage report through the external generator."""
        ...
