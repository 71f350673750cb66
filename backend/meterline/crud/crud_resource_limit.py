"""CRUD operations for the ResourceLimitSet model."""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from meterline.crud._base import CRUDBase
from meterline.models.resource_limit_set import ResourceLimitSet
from meterline.schemas.resource_limit import ResourceLimitSetCreate


class CRUDResourceLimitSet(CRUDBase[ResourceLimitSet, ResourceLimitSetCreate]):
    """CRUD operations for the ResourceLimitSet model."""

    async def get_by_company(
        self, db: AsyncSession, *, company_id: str
    ) -> Optional[ResourceLimitSet]:
        """Get the limit set configured for a company, if any."""
        query = (
            select(self.model)
            .where(self.model.company_id == company_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def upsert(
        self,
        db: AsyncSession,
        *,
        company_id: str,
        tenant_id: str,
        limits: list[dict[str, Any]],
    ) -> ResourceLimitSet:
        """Replace the full limit set for a company in one statement.

        Args:
            db: Database session
            company_id: Owning company
            tenant_id: Tenant the company belongs to
            limits: JSON-ready limit dicts; the stored list is overwritten

        Returns:
            The stored ResourceLimitSet
        """
        now = datetime.now(timezone.utc)
        stmt = (
            insert(self.model)
            .values(
                company_id=company_id,
                tenant_id=tenant_id,
                limits=limits,
                created_at=now,
                modified_at=now,
            )
            .on_conflict_do_update(
                index_elements=[self.model.company_id],
                set_={"tenant_id": tenant_id, "limits": limits, "modified_at": now},
            )
            .returning(self.model)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        limit_set = result.scalar_one()
        await db.commit()
        return limit_set


resource_limit_set = CRUDResourceLimitSet(ResourceLimitSet)
