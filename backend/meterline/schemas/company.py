"""Company schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CompanyBase(BaseModel):
    """Base schema for companies."""

    name: str = Field(..., description="Display name of the company")
    tenant_id: Optional[str] = Field(
        None, description="Tenant the company belongs to; defaults to the company itself"
    )


class CompanyCreate(CompanyBase):
    """Schema for creating a company."""

    id: str


class Company(CompanyBase):
    """Complete company schema."""

    id: str

    model_config = ConfigDict(from_attributes=True)
