"""CRUD operations for the UsageRecord model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import and_, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from meterline.crud._base import CRUDBase
from meterline.models.usage_record import UsageRecord
from meterline.schemas.usage_record import UsageRecordCreate


class CRUDUsageRecord(CRUDBase[UsageRecord, UsageRecordCreate]):
    """CRUD operations for the UsageRecord model."""

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
        """Get audit records for one resource, newest first.

        Args:
            db: Database session
            company_id: Owning company
            resource_type: Resource to filter on
            start_date: Inclusive lower bound on timestamp
            end_date: Inclusive upper bound on timestamp
            limit: Maximum number of records

        Returns:
            Matching usage records
        """
        conditions = [
            self.model.company_id == company_id,
            self.model.resource_type == resource_type,
        ]
        if start_date is not None:
            conditions.append(self.model.timestamp >= start_date)
        if end_date is not None:
            conditions.append(self.model.timestamp <= end_date)

        query = select(self.model).where(and_(*conditions)).order_by(desc(self.model.timestamp))
        if limit is not None:
            query = query.limit(limit)

        result = await db.execute(query)
        return list(result.scalars().all())


usage_record = CRUDUsageRecord(UsageRecord)
