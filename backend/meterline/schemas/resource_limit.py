"""Resource limit schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from meterline.domains.usage.types import ResetPolicy, ResourceType, TimeUnit


class ResourceLimit(BaseModel):
    """Limit configured for one metered resource of a company.

    A ``limit`` of 0 leaves the resource uncapped; it is still counted.
    """

    resource_type: ResourceType
    limit: float = Field(..., ge=0, description="Maximum usage per period; 0 means unlimited")
    unit: TimeUnit = Field(..., description="Length of the metering period")
    reset_policy: ResetPolicy = Field(..., description="Rolling or calendar-aligned periods")
    alert_threshold: Optional[float] = Field(
        None,
        ge=0,
        le=100,
        description="Usage percentage at which an approaching-limit alert fires",
    )


class ConfigureResourceLimitsRequest(BaseModel):
    """Request schema for replacing a company's limit set."""

    tenant_id: Optional[str] = Field(
        None, description="Tenant override; resolved from the company directory when omitted"
    )
    limits: list[ResourceLimit] = Field(default_factory=list)


class ResourceLimitSetCreate(BaseModel):
    """Schema for storing a company's limit set."""

    company_id: str
    tenant_id: str
    limits: list[ResourceLimit]
