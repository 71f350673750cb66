"""Usage metering service: the public face of the usage domain."""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from meterline.core.exceptions import InvalidStateError
from meterline.core.logging import logger
from meterline.core.protocols.reporting import UsageReportGenerator
from meterline.domains.companies.protocols import CompanyDirectoryProtocol
from meterline.domains.usage.exceptions import UsageReportError
from meterline.domains.usage.limits import LimitRegistry
from meterline.domains.usage.protocols import UsageLedgerProtocol, UsageMeteringServiceProtocol
from meterline.domains.usage.recorder import UsageRecorder
from meterline.domains.usage.repository import ResourceUsageRepositoryProtocol
from meterline.domains.usage.summary import SummaryAggregator
from meterline.domains.usage.types import MeteringStatus, ResourceType, TimeUnit
from meterline.schemas.resource_limit import ResourceLimit
from meterline.schemas.resource_usage import ResourceUsage
from meterline.schemas.usage_record import UsageRecord
from meterline.schemas.usage_report import UsageReport
from meterline.schemas.usage_summary import UsageSummary


def _as_utc(value: datetime) -> datetime:
    # Naive bounds are read as UTC, matching SystemClock.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UsageMeteringService(UsageMeteringServiceProtocol):
    """Composes the limit registry, ledger, recorder and summary aggregator."""

    def __init__(
        self,
        limits: LimitRegistry,
        ledger: UsageLedgerProtocol,
        recorder: UsageRecorder,
        summaries: SummaryAggregator,
        usage_repo: ResourceUsageRepositoryProtocol,
        directory: CompanyDirectoryProtocol,
        report_generator: UsageReportGenerator,
    ) -> None:
        """Initialize with the usage components and external collaborators."""
        self._limits = limits
        self._ledger = ledger
        self._recorder = recorder
        self._summaries = summaries
        self._usage_repo = usage_repo
        self._directory = directory
        self._report_generator = report_generator

    async def configure_resource_limits(
        self,
        db: AsyncSession,
        company_id: str,
        limits: list[ResourceLimit],
        tenant_id: Optional[str] = None,
    ) -> list[ResourceLimit]:
        """Replace the limit set of a company.

        The company must exist even when *tenant_id* is given explicitly.
        """
        resolved_tenant_id = await self._directory.resolve_tenant_id(db, company_id)
        return await self._limits.configure_resource_limits(
            db, company_id, tenant_id or resolved_tenant_id, limits
        )

    async def get_resource_limits(self, db: AsyncSession, company_id: str) -> list[ResourceLimit]:
        """Return the configured limits of a company."""
        return await self._limits.get_resource_limits(db, company_id)

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
        return await self._ledger.track_usage(
            db, company_id, resource_type, amount=amount, metadata=metadata, user_id=user_id
        )

    async def get_resource_usage(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: Optional[ResourceType] = None,
    ) -> list[ResourceUsage]:
        """Return the entry of one resource, or all entries when none is named."""
        if resource_type is None:
            entries = await self._usage_repo.list_for_company(db, company_id=company_id)
        else:
            entry = await self._usage_repo.get_for_resource(
                db, company_id=company_id, resource_type=ResourceType(resource_type).value
            )
            entries = [entry] if entry is not None else []
        return [ResourceUsage.from_model(entry) for entry in entries]

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
        return await self._recorder.get_history(
            db,
            company_id,
            ResourceType(resource_type),
            start_date=start_date,
            end_date=end_date,
            limit=limit,
        )

    async def get_usage_summary(self, db: AsyncSession, company_id: str) -> Optional[UsageSummary]:
        """Return the usage summary of a company, or None if nothing is tracked."""
        return await self._summaries.get_summary(db, company_id)

    async def set_metering_status(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: ResourceType,
        status: MeteringStatus,
    ) -> ResourceUsage:
        """Change the status of a ledger entry."""
        return await self._ledger.set_metering_status(db, company_id, resource_type, status)

    async def reset_usage(
        self, db: AsyncSession, company_id: str, resource_type: ResourceType
    ) -> ResourceUsage:
        """Zero the counter of a ledger entry."""
        return await self._ledger.reset_usage(db, company_id, resource_type)

    async def get_usage_report(
        self,
        company_id: str,
        period: TimeUnit,
        start_date: datetime,
        end_date: datetime,
    ) -> UsageReport:
        """Forward a report request to the external generator.

        Both bounds are normalized to UTC; naive values are treated as UTC.

        Raises:
            InvalidStateError: start_date is after end_date
            UsageReportError: the generator failed for any reason
        """
        start_date, end_date = _as_utc(start_date), _as_utc(end_date)
        if start_date > end_date:
            raise InvalidStateError("start_date must not be after end_date")

        try:
            report = await self._report_generator.generate_usage_report(
                company_id, TimeUnit(period), start_date, end_date
            )
        except Exception as e:
            logger.with_context(company_id=company_id).error(
                f"Usage report generation failed: {e}", exc_info=True
            )
            raise UsageReportError() from e

        return UsageReport(
            company_id=company_id,
            period=period,
            start_date=start_date,
            end_date=end_date,
            report=report,
        )
