"""Resource usage (ledger entry) schemas."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from meterline.domains.usage.types import MeteringStatus, ResetPolicy, ResourceType, TimeUnit


class MeteringPeriod(BaseModel):
    """Half-open metering window ``[start, end)``."""

    start: datetime
    end: datetime


class ResourceUsageCreate(BaseModel):
    """Schema for creating a ledger entry."""

    company_id: str
    tenant_id: str
    resource_type: ResourceType
    current_value: float = 0
    max_value: float
    unit: TimeUnit
    reset_policy: ResetPolicy
    period_start: datetime
    period_end: datetime
    last_updated: datetime
    status: MeteringStatus = MeteringStatus.ACTIVE
    version: int = 0

    model_config = ConfigDict(use_enum_values=True, validate_default=True)


class ResourceUsage(BaseModel):
    """Current consumption of one resource by one company."""

    id: UUID
    company_id: str
    tenant_id: str
    resource_type: ResourceType
    current_value: float
    max_value: float
    unit: TimeUnit
    reset_policy: ResetPolicy
    period: MeteringPeriod
    last_updated: datetime
    status: MeteringStatus
    version: int

    @classmethod
    def from_model(cls, usage: Any) -> "ResourceUsage":
        """Build from a ResourceUsage row."""
        return cls(
            id=usage.id,
            company_id=usage.company_id,
            tenant_id=usage.tenant_id,
            resource_type=usage.resource_type,
            current_value=usage.current_value,
            max_value=usage.max_value,
            unit=usage.unit,
            reset_policy=usage.reset_policy,
            period=MeteringPeriod(start=usage.period_start, end=usage.period_end),
            last_updated=usage.last_updated,
            status=usage.status,
            version=usage.version,
        )


class TrackUsageRequest(BaseModel):
    """Request schema for reporting consumption of a resource."""

    resource_type: ResourceType
    amount: float = Field(1, ge=0, description="Units consumed by this operation")
    metadata: dict[str, Any] = Field(default_factory=dict)
    user_id: Optional[str] = None


class TrackUsageResponse(BaseModel):
    """Outcome of a usage report."""

    admitted: bool


class SetMeteringStatusRequest(BaseModel):
    """Request schema for changing a ledger entry's status."""

    status: MeteringStatus
