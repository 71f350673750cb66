"""Limit registry: per-company limit configuration and ledger initialization."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from meterline.core.logging import logger
from meterline.core.protocols.clock import Clock
from meterline.domains.usage.exceptions import InvalidLimitConfigurationError, LedgerConflictError
from meterline.domains.usage.periods import calculate_period
from meterline.domains.usage.repository import (
    ResourceLimitRepositoryProtocol,
    ResourceUsageRepositoryProtocol,
)
from meterline.domains.usage.retry import retry_on_conflict
from meterline.domains.usage.types import MeteringStatus, ResourceType
from meterline.schemas.resource_limit import ResourceLimit
from meterline.schemas.resource_usage import ResourceUsageCreate


class LimitRegistry:
    """Stores the limit set of each company and keeps ledger entries in step.

    A limit set is always replaced as a whole. Reconfiguring never clears a
    counter whose period is still running; it only refreshes the cap and the
    unit/reset policy used at the next rollover.
    """

    def __init__(
        self,
        limit_repo: ResourceLimitRepositoryProtocol,
        usage_repo: ResourceUsageRepositoryProtocol,
        clock: Clock,
        max_attempts: int = 5,
    ) -> None:
        """Initialize with repositories, a clock and the CAS retry budget."""
        self._limit_repo = limit_repo
        self._usage_repo = usage_repo
        self._clock = clock
        self._initialize_entry = retry_on_conflict(max_attempts)(self._initialize_entry_once)

    async def configure_resource_limits(
        self,
        db: AsyncSession,
        company_id: str,
        tenant_id: str,
        limits: list[ResourceLimit],
    ) -> list[ResourceLimit]:
        """Replace the limit set of a company and initialize its ledger entries.

        Raises:
            InvalidLimitConfigurationError: a resource type appears twice
        """
        seen: set[ResourceType] = set()
        for limit in limits:
            if limit.resource_type in seen:
                raise InvalidLimitConfigurationError(
                    f"Duplicate limit for resource type: {limit.resource_type.value}"
                )
            seen.add(limit.resource_type)

        await self._limit_repo.upsert(
            db,
            company_id=company_id,
            tenant_id=tenant_id,
            limits=[limit.model_dump(mode="json") for limit in limits],
        )
        logger.with_context(company_id=company_id, tenant_id=tenant_id).info(
            f"Configured {len(limits)} resource limits"
        )

        await self.initialize_resource_usage(db, company_id, tenant_id, limits)
        return list(limits)

    async def get_resource_limits(self, db: AsyncSession, company_id: str) -> list[ResourceLimit]:
        """Return the configured limits, or an empty list if none were set."""
        limit_set = await self._limit_repo.get_by_company(db, company_id=company_id)
        if limit_set is None:
            return []
        return [ResourceLimit.model_validate(item) for item in limit_set.limits]

    async def get_limit(
        self, db: AsyncSession, company_id: str, resource_type: ResourceType
    ) -> Optional[ResourceLimit]:
        """Return the configured limit of one resource, if any."""
        for limit in await self.get_resource_limits(db, company_id):
            if limit.resource_type == resource_type:
                return limit
        return None

    async def initialize_resource_usage(
        self,
        db: AsyncSession,
        company_id: str,
        tenant_id: str,
        limits: list[ResourceLimit],
    ) -> None:
        """Create, roll over or refresh the ledger entry of every limit."""
        for limit in limits:
            await self._initialize_entry(db, company_id, tenant_id, limit)

    async def _initialize_entry_once(
        self,
        db: AsyncSession,
        company_id: str,
        tenant_id: str,
        limit: ResourceLimit,
    ) -> None:
        resource_type = limit.resource_type.value
        now = self._clock.now()
        usage = await self._usage_repo.get_for_resource(
            db, company_id=company_id, resource_type=resource_type
        )

        if usage is None:
            period = calculate_period(now, limit.unit, limit.reset_policy)
            await self._usage_repo.create(
                db,
                obj_in=ResourceUsageCreate(
                    company_id=company_id,
                    tenant_id=tenant_id,
                    resource_type=limit.resource_type,
                    current_value=0,
                    max_value=limit.limit,
                    unit=limit.unit,
                    reset_policy=limit.reset_policy,
                    period_start=period.start,
                    period_end=period.end,
                    last_updated=now,
                    status=MeteringStatus.ACTIVE,
                ),
            )
            return

        values: dict = {}
        if usage.period_end < now:
            period = calculate_period(now, limit.unit, limit.reset_policy)
            values.update(
                current_value=0,
                period_start=period.start,
                period_end=period.end,
                last_updated=now,
            )
        if usage.max_value != limit.limit:
            values["max_value"] = limit.limit
        if usage.unit != limit.unit.value:
            values["unit"] = limit.unit.value
        if usage.reset_policy != limit.reset_policy.value:
            values["reset_policy"] = limit.reset_policy.value
        if usage.tenant_id != tenant_id:
            values["tenant_id"] = tenant_id

        if not values:
            return
        if not await self._usage_repo.compare_and_set(
            db, usage_id=usage.id, expected_version=usage.version, values=values
        ):
            raise LedgerConflictError(company_id, resource_type)
