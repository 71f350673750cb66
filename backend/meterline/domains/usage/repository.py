"""Usage domain repositories wrapping the metering crud singletons."""

from datetime import datetime
from typing import Any, Optional, Protocol
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from meterline import crud
from meterline.domains.usage.exceptions import LedgerConflictError
from meterline.models.resource_limit_set import ResourceLimitSet
from meterline.models.resource_usage import ResourceUsage
from meterline.models.usage_record import UsageRecord
from meterline.models.usage_summary import UsageSummary
from meterline.schemas.resource_usage import ResourceUsageCreate
from meterline.schemas.usage_record import UsageRecordCreate
from meterline.schemas.usage_summary import UsageSummaryCreate


class ResourceLimitRepositoryProtocol(Protocol):
    """Data access for per-company limit sets."""

    async def get_by_company(
        self, db: AsyncSession, *, company_id: str
    ) -> Optional[ResourceLimitSet]:
        """Get the limit set of a company."""
        ...

    async def upsert(
        self,
        db: AsyncSession,
        *,
        company_id: str,
        tenant_id: str,
        limits: list[dict[str, Any]],
    ) -> ResourceLimitSet:
        """Replace the limit set of a company."""
        ...


class ResourceUsageRepositoryProtocol(Protocol):
    """Data access for ledger entries."""

    async def get_for_resource(
        self, db: AsyncSession, *, company_id: str, resource_type: str
    ) -> Optional[ResourceUsage]:
        """Get the ledger entry for (company, resource type)."""
        ...

    async def list_for_company(self, db: AsyncSession, *, company_id: str) -> list[ResourceUsage]:
        """Get every ledger entry of a company, ordered by resource type."""
        ...

    async def create(self, db: AsyncSession, *, obj_in: ResourceUsageCreate) -> ResourceUsage:
        """Create a ledger entry; raises LedgerConflictError if one already exists."""
        ...

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        usage_id: UUID,
        expected_version: int,
        values: dict[str, Any],
    ) -> bool:
        """Write *values* only if the entry is still at *expected_version*."""
        ...


class UsageRecordRepositoryProtocol(Protocol):
    """Data access for the usage audit trail."""

    async def create(self, db: AsyncSession, *, obj_in: UsageRecordCreate) -> UsageRecord:
        """Append an audit record."""
        ...

    async def get_history(
        self,
        db: AsyncSession,
        *,
        company_id: str,
        resource_type: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[UsageRecord]:
        """Get audit records for one resource, newest first."""
        ...


class UsageSummaryRepositoryProtocol(Protocol):
    """Data access for per-company usage summaries."""

    async def get_by_company(self, db: AsyncSession, *, company_id: str) -> Optional[UsageSummary]:
        """Get the stored summary of a company."""
        ...

    async def upsert(self, db: AsyncSession, *, obj_in: UsageSummaryCreate) -> UsageSummary:
        """Create or overwrite the summary of a company."""
        ...


class ResourceLimitRepository(ResourceLimitRepositoryProtocol):
    """Delegates to the crud.resource_limit_set singleton."""

    async def get_by_company(
        self, db: AsyncSession, *, company_id: str
    ) -> Optional[ResourceLimitSet]:
        """Get the limit set of a company."""
        return await crud.resource_limit_set.get_by_company(db, company_id=company_id)

    async def upsert(
        self,
        db: AsyncSession,
        *,
        company_id: str,
        tenant_id: str,
        limits: list[dict[str, Any]],
    ) -> ResourceLimitSet:
        """Replace the limit set of a company."""
        return await crud.resource_limit_set.upsert(
            db, company_id=company_id, tenant_id=tenant_id, limits=limits
        )


class ResourceUsageRepository(ResourceUsageRepositoryProtocol):
    """Delegates to the crud.resource_usage singleton."""

    async def get_for_resource(
        self, db: AsyncSession, *, company_id: str, resource_type: str
    ) -> Optional[ResourceUsage]:
        """Get the ledger entry for (company, resource type)."""
        return await crud.resource_usage.get_for_resource(
            db, company_id=company_id, resource_type=resource_type
        )

    async def list_for_company(self, db: AsyncSession, *, company_id: str) -> list[ResourceUsage]:
        """Get every ledger entry of a company, ordered by resource type."""
        return await crud.resource_usage.list_for_company(db, company_id=company_id)

    async def create(self, db: AsyncSession, *, obj_in: ResourceUsageCreate) -> ResourceUsage:
        """Create a ledger entry.

        Two writers creating the same (company, resource type) entry collide
        on the unique constraint; the loser sees a LedgerConflictError and
        retries against the row the winner created.
        """
        try:
            return await crud.resource_usage.create(db, obj_in=obj_in)
        except IntegrityError as e:
            await db.rollback()
            raise LedgerConflictError(obj_in.company_id, str(obj_in.resource_type)) from e

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        usage_id: UUID,
        expected_version: int,
        values: dict[str, Any],
    ) -> bool:
        """Write *values* only if the entry is still at *expected_version*."""
        return await crud.resource_usage.compare_and_set(
            db, usage_id=usage_id, expected_version=expected_version, values=values
        )


class UsageRecordRepository(UsageRecordRepositoryProtocol):
    """Delegates to the crud.usage_record singleton."""

    async def create(self, db: AsyncSession, *, obj_in: UsageRecordCreate) -> UsageRecord:
        """Append an audit record."""
        return await crud.usage_record.create(db, obj_in=obj_in)

    async def get_history(
        self,
        db: AsyncSession,
        *,
        company_id: str,
        resource_type: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[UsageRecord]:
        """Get audit records for one resource, newest first."""
        return await crud.usage_record.get_history(
            db,
            company_id=company_id,
            resource_type=resource_type,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
        )


class UsageSummaryRepository(UsageSummaryRepositoryProtocol):
    """Delegates to the crud.usage_summary singleton."""

    async def get_by_company(self, db: AsyncSession, *, company_id: str) -> Optional[UsageSummary]:
        """Get the stored summary of a company."""
        return await crud.usage_summary.get_by_company(db, company_id=company_id)

    async def upsert(self, db: AsyncSession, *, obj_in: UsageSummaryCreate) -> UsageSummary:
        """Create or overwrite the summary of a company."""
        return await crud.usage_summary.upsert(db, obj_in=obj_in)
