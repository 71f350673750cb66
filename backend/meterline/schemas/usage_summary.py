"""Usage summary schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from meterline.domains.usage.types import ResourceHealth, ResourceType, TimeUnit


class ResourceSummary(BaseModel):
    """Usage of one resource relative to its limit."""

    current_usage: float
    limit: float = Field(..., description="Configured limit, -1 when unlimited")
    percent_used: float
    remaining_usage: float = Field(..., description="Headroom left, -1 when unlimited")
    overage_usage: float
    status: ResourceHealth


class SummaryPeriod(BaseModel):
    """Period a summary was computed over."""

    start: datetime
    end: datetime
    unit: TimeUnit


class UsageSummaryCreate(BaseModel):
    """Schema for storing a computed summary."""

    company_id: str
    tenant_id: str
    period_start: datetime
    period_end: datetime
    period_unit: TimeUnit
    resources: dict[ResourceType, ResourceSummary]
    total_usage_percentage: float
    last_updated: datetime


class UsageSummary(BaseModel):
    """Cross-resource usage summary of a company."""

    company_id: str
    tenant_id: str
    period: SummaryPeriod
    resources: dict[ResourceType, ResourceSummary]
    total_usage_percentage: float
    last_updated: datetime

    @classmethod
    def from_model(cls, summary: Any) -> "UsageSummary":
        """Build from a UsageSummary row."""
        return cls(
            company_id=summary.company_id,
            tenant_id=summary.tenant_id,
            period=SummaryPeriod(
                start=summary.period_start, end=summary.period_end, unit=summary.period_unit
            ),
            resources=summary.resources,
            total_usage_percentage=summary.total_usage_percentage,
            last_updated=summary.last_updated,
        )
