"""Usage record (audit trail) schemas."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from meterline.domains.usage.types import ResourceType


class UsageRecordCreate(BaseModel):
    """Schema for appending an audit record."""

    company_id: str
    tenant_id: str
    resource_type: ResourceType
    value: float
    timestamp: datetime
    # stored in the "metadata" column
    record_metadata: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("record_metadata", "metadata"),
        serialization_alias="metadata",
    )
    user_id: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class UsageRecord(UsageRecordCreate):
    """Complete usage record schema."""

    id: UUID

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
