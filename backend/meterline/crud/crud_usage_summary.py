"""CRUD operations for the UsageSummary model."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from meterline.crud._base import CRUDBase
from meterline.models.usage_summary import UsageSummary
from meterline.schemas.usage_summary import UsageSummaryCreate


class CRUDUsageSummary(CRUDBase[UsageSummary, UsageSummaryCreate]):
    """CRUD operations for the UsageSummary model."""

    async def get_by_company(self, db: AsyncSession, *, company_id: str) -> Optional[UsageSummary]:
        """Get the stored summary of a company."""
        query = (
            select(self.model)
            .where(self.model.company_id == company_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def upsert(self, db: AsyncSession, *, obj_in: UsageSummaryCreate) -> UsageSummary:
        """Create or fully overwrite the summary of a company."""
        now = datetime.now(timezone.utc)
        values = obj_in.model_dump(mode="json")
        values.update(
            period_start=obj_in.period_start,
            period_end=obj_in.period_end,
            last_updated=obj_in.last_updated,
        )
        stmt = (
            insert(self.model)
            .values(**values, created_at=now, modified_at=now)
            .on_conflict_do_update(
                index_elements=[self.model.company_id],
                set_={
                    **{k: v for k, v in values.items() if k != "company_id"},
                    "modified_at": now,
                },
            )
            .returning(self.model)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        summary = result.scalar_one()
        await db.commit()
        return summary


usage_summary = CRUDUsageSummary(UsageSummary)
