"""Schemas for the application."""

from .company import Company, CompanyCreate
from .errors import (
    ExternalServiceErrorResponse,
    InvalidStateErrorResponse,
    NotFoundErrorResponse,
    ValidationErrorResponse,
)
from .resource_limit import ConfigureResourceLimitsRequest, ResourceLimit, ResourceLimitSetCreate
from .resource_usage import (
    MeteringPeriod,
    ResourceUsage,
    ResourceUsageCreate,
    SetMeteringStatusRequest,
    TrackUsageRequest,
    TrackUsageResponse,
)
from .usage_record import UsageRecord, UsageRecordCreate
from .usage_report import UsageReport
from .usage_summary import ResourceSummary, SummaryPeriod, UsageSummary, UsageSummaryCreate

__all__ = [
    "Company",
    "CompanyCreate",
    "ConfigureResourceLimitsRequest",
    "ExternalServiceErrorResponse",
    "InvalidStateErrorResponse",
    "MeteringPeriod",
    "NotFoundErrorResponse",
    "ResourceLimit",
    "ResourceLimitSetCreate",
    "ResourceSummary",
    "ResourceUsage",
    "ResourceUsageCreate",
    "SetMeteringStatusRequest",
    "SummaryPeriod",
    "TrackUsageRequest",
    "TrackUsageResponse",
    "UsageRecord",
    "UsageRecordCreate",
    "UsageReport",
    "UsageSummary",
    "UsageSummaryCreate",
]
