"""Shared error response schemas for the Meterline API.

Used in the ``responses=`` mapping of the usage endpoints so the OpenAPI
document shows the body each exception handler returns.
"""

from typing import Dict, List

from pydantic import BaseModel, Field


class ValidationErrorResponse(BaseModel):
    """Response returned when request validation fails (HTTP 422)."""

    errors: List[Dict[str, str]] = Field(
        ...,
        description="One entry per invalid field, keyed by its dotted location",
        json_schema_extra={"example": [{"body.limits.0.limit": "Input should be >= 0"}]},
    )


class NotFoundErrorResponse(BaseModel):
    """Response returned when a company or ledger entry is not found (HTTP 404)."""

    detail: str = Field(
        ...,
        description="Error message describing what was not found",
        json_schema_extra={"example": "Company not found: acme"},
    )


class InvalidStateErrorResponse(BaseModel):
    """Response returned when a request conflicts with domain rules (HTTP 400)."""

    detail: str = Field(
        ...,
        description="Error message describing the rejected request",
        json_schema_extra={"example": "Duplicate limit for resource type: api_calls"},
    )


class ExternalServiceErrorResponse(BaseModel):
    """Response returned when a downstream service fails (HTTP 502)."""

    detail: str = Field(
        ...,
        description="Error message describing the failed dependency",
        json_schema_extra={"example": "Failed to generate usage report"},
    )
