"""Models for the application."""

from .company import Company
from .resource_limit_set import ResourceLimitSet
from .resource_usage import ResourceUsage
from .usage_record import UsageRecord
from .usage_summary import UsageSummary

__all__ = [
    "Company",
    "ResourceLimitSet",
    "ResourceUsage",
    "UsageRecord",
    "UsageSummary",
]
