"""Usage recorder: the append-only audit trail of trackUsage calls."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from meterline.core.logging import logger
from meterline.domains.usage.repository import UsageRecordRepositoryProtocol
from meterline.domains.usage.types import ResourceType
from meterline.schemas.usage_record import UsageRecord, UsageRecordCreate


class UsageRecorder:
    """Writes one immutable record per tracked call, admitted or not.

    Recording is an audit concern only. A failed write is logged and
    dropped so it can never change the outcome of the call being audited.
    """

    def __init__(self, record_repo: UsageRecordRepositoryProtocol) -> None:
        """Initialize with the record repository."""
        self._record_repo = record_repo

    async def record(
        self,
        db: AsyncSession,
        *,
        company_id: str,
        tenant_id: str,
        resource_type: ResourceType,
        value: float,
        timestamp: datetime,
        metadata: Optional[dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> bool:
        """Append a usage record. Returns False if the write failed."""
        try:
            await self._record_repo.create(
                db,
                obj_in=UsageRecordCreate(
                    company_id=company_id,
                    tenant_id=tenant_id,
                    resource_type=resource_type,
                    value=value,
                    timestamp=timestamp,
                    record_metadata=dict(metadata or {}),
                    user_id=user_id,
                ),
            )
            return True
        except Exception as e:
            logger.with_context(company_id=company_id, resource_type=resource_type.value).error(
                f"Failed to record usage: {e}", exc_info=True
            )
            await db.rollback()
            return False

    async def get_history(
        self,
        db: AsyncSession,
        company_id: str,
        resource_type: ResourceType,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[UsageRecord]:
        """Return records for one resource, newest first, bounds inclusive."""
        records = await self._record_repo.get_history(
            db,
            company_id=company_id,
            resource_type=resource_type.value,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
        )
        return [UsageRecord.model_validate(record, from_attributes=True) for record in records]
