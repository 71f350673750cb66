"""CRUD operations for the ResourceUsage model (ledger entries)."""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from meterline.crud._base import CRUDBase
from meterline.models.resource_usage import ResourceUsage
from meterline.schemas.resource_usage import ResourceUsageCreate


class CRUDResourceUsage(CRUDBase[ResourceUsage, ResourceUsageCreate]):
    """CRUD operations for the ResourceUsage model."""

    async def get_for_resource(
        self,
        db: AsyncSession,
        *,
        company_id: str,
        resource_type: str,
    ) -> Optional[ResourceUsage]:
        """Get the ledger entry for one (company, resource type) pair.

        Always reloads from the database so a retried transaction never
        decides on a stale identity-map copy.
        """
        query = (
            select(self.model)
            .where(
                and_(
                    self.model.company_id == company_id,
                    self.model.resource_type == resource_type,
                )
            )
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def list_for_company(self, db: AsyncSession, *, company_id: str) -> list[ResourceUsage]:
        """Get all ledger entries of a company ordered by resource type."""
        query = (
            select(self.model)
            .where(self.model.company_id == company_id)
            .order_by(self.model.resource_type)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def compare_and_set(
        self,
        db: AsyncSession,
        *,
        usage_id: UUID,
        expected_version: int,
        values: dict[str, Any],
    ) -> bool:
        """Conditionally update a ledger entry.

        The row is only written if its version still equals
        ``expected_version``; the version is bumped by one on success.

        Args:
            db: Database session
            usage_id: Ledger entry ID
            expected_version: Version the caller read
            values: Columns to write

        Returns:
            True if the row was updated, False if another writer got there first
        """
        stmt = (
            update(self.model)
            .where(and_(self.model.id == usage_id, self.model.version == expected_version))
            .values(
                **values,
                version=expected_version + 1,
                modified_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount == 1


resource_usage = CRUDResourceUsage(ResourceUsage)
