"""Summary aggregator: cross-resource usage overview per company."""

from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from meterline.core.logging import logger
from meterline.core.protocols.clock import Clock
from meterline.domains.usage.repository import (
    ResourceUsageRepositoryProtocol,
    UsageSummaryRepositoryProtocol,
)
from meterline.domains.usage.types import (
    DEFAULT_WARNING_PERCENT,
    UNLIMITED,
    ResourceHealth,
    ResourceType,
    classify_usage,
    is_unlimited,
    percent_used,
)
from meterline.models.resource_usage import ResourceUsage as ResourceUsageModel
from meterline.schemas.usage_summary import ResourceSummary, UsageSummary, UsageSummaryCreate


def summarize_resource(
    usage: ResourceUsageModel, warning_percent: float = DEFAULT_WARNING_PERCENT
) -> ResourceSummary:
    """Summarize one ledger entry against its limit."""
    if is_unlimited(usage.max_value):
        return ResourceSummary(
            current_usage=usage.current_value,
            limit=UNLIMITED,
            percent_used=0,
            remaining_usage=UNLIMITED,
            overage_usage=0,
            status=ResourceHealth.NORMAL,
        )

    percent = percent_used(usage.current_value, usage.max_value)
    return ResourceSummary(
        current_usage=usage.current_value,
        limit=usage.max_value,
        percent_used=percent,
        remaining_usage=max(0, usage.max_value - usage.current_value),
        overage_usage=max(0, usage.current_value - usage.max_value),
        status=classify_usage(percent, warning_percent),
    )


class SummaryAggregator:
    """Derives and stores the usage summary of a company.

    The summary is always recomputed in full from the ledger entries and
    never patched. Its period is that of the first entry by resource type;
    entries of one company share a unit by configuration, not by alignment.
    ``totalUsagePercentage`` averages only resources with a finite limit.
    """

    def __init__(
        self,
        usage_repo: ResourceUsageRepositoryProtocol,
        summary_repo: UsageSummaryRepositoryProtocol,
        clock: Clock,
        warning_percent: float = DEFAULT_WARNING_PERCENT,
    ) -> None:
        """Initialize with repositories, a clock and the warning boundary."""
        self._usage_repo = usage_repo
        self._summary_repo = summary_repo
        self._clock = clock
        self._warning_percent = warning_percent

    def build(
        self, company_id: str, tenant_id: str, entries: Sequence[ResourceUsageModel]
    ) -> Optional[UsageSummaryCreate]:
        """Compute a summary from ledger entries; None when there are none."""
        if not entries:
            return None

        resources: dict[ResourceType, ResourceSummary] = {}
        finite_percents: list[float] = []
        for usage in entries:
            resource_summary = summarize_resource(usage, self._warning_percent)
            resources[ResourceType(usage.resource_type)] = resource_summary
            if not is_unlimited(usage.max_value):
                finite_percents.append(resource_summary.percent_used)

        total = sum(finite_percents) / len(finite_percents) if finite_percents else 0.0
        first = entries[0]
        return UsageSummaryCreate(
            company_id=company_id,
            tenant_id=tenant_id,
            period_start=first.period_start,
            period_end=first.period_end,
            period_unit=first.unit,
            resources=resources,
            total_usage_percentage=total,
            last_updated=self._clock.now(),
        )

    async def update_summary(
        self, db: AsyncSession, company_id: str, tenant_id: str
    ) -> Optional[UsageSummary]:
        """Recompute and persist the summary. Returns None if nothing is tracked."""
        entries = await self._usage_repo.list_for_company(db, company_id=company_id)
        summary_in = self.build(company_id, tenant_id, entries)
        if summary_in is None:
            return None
        stored = await self._summary_repo.upsert(db, obj_in=summary_in)
        return UsageSummary.from_model(stored)

    async def refresh(self, db: AsyncSession, company_id: str, tenant_id: str) -> None:
        """Regenerate the summary after a ledger mutation; failures are logged only."""
        try:
            await self.update_summary(db, company_id, tenant_id)
        except Exception as e:
            logger.with_context(company_id=company_id).error(
                f"Failed to update usage summary: {e}", exc_info=True
            )
            await db.rollback()

    async def get_summary(self, db: AsyncSession, company_id: str) -> Optional[UsageSummary]:
        """Return the stored summary, regenerating it once if it is missing."""
        stored = await self._summary_repo.get_by_company(db, company_id=company_id)
        if stored is not None:
            return UsageSummary.from_model(stored)

        entries = await self._usage_repo.list_for_company(db, company_id=company_id)
        if not entries:
            return None
        await self.update_summary(db, company_id, entries[0].tenant_id)

        stored = await self._summary_repo.get_by_company(db, company_id=company_id)
        return UsageSummary.from_model(stored) if stored is not None else None
