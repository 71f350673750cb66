"""Fakes for the usage domain."""

from meterline.domains.usage.fakes.repository import (
    FakeResourceLimitRepository,
    FakeResourceUsageRepository,
    FakeUsageRecordRepository,
    FakeUsageSummaryRepository,
)

__all__ = [
    "FakeResourceLimitRepository",
    "FakeResourceUsageRepository",
    "FakeUsageRecordRepository",
    "FakeUsageSummaryRepository",
]
