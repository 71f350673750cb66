"""Usage domain test fixtures and helpers."""

from datetime import datetime, timezone
from typing import Optional
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from meterline.domains.usage.types import MeteringStatus, ResetPolicy, ResourceType, TimeUnit
from meterline.models.resource_usage import ResourceUsage as ResourceUsageModel
from meterline.schemas.resource_limit import ResourceLimit

DEFAULT_COMPANY_ID = "acme"
DEFAULT_TENANT_ID = "tenant-1"

# FakeClock default instant
NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
JANUARY_START = datetime(2024, 1, 1, tzinfo=timezone.utc)
JANUARY_END = datetime(2024, 1, 31, 23, 59, 59, 999000, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_limit(
    resource_type: ResourceType = ResourceType.API_CALLS,
    limit: float = 100,
    unit: TimeUnit = TimeUnit.MONTHLY,
    reset_policy: ResetPolicy = ResetPolicy.CALENDAR,
    alert_threshold: Optional[float] = None,
) -> ResourceLimit:
    return ResourceLimit(
        resource_type=resource_type,
        limit=limit,
        unit=unit,
        reset_policy=reset_policy,
        alert_threshold=alert_threshold,
    )


def _make_usage_model(
    *,
    company_id: str = DEFAULT_COMPANY_ID,
    tenant_id: str = DEFAULT_TENANT_ID,
    resource_type: ResourceType = ResourceType.API_CALLS,
    current_value: float = 0,
    max_value: float = 100,
    unit: TimeUnit = TimeUnit.MONTHLY,
    reset_policy: ResetPolicy = ResetPolicy.CALENDAR,
    period_start: datetime = JANUARY_START,
    period_end: datetime = JANUARY_END,
    status: MeteringStatus = MeteringStatus.ACTIVE,
    version: int = 0,
) -> ResourceUsageModel:
    """Build a ledger entry row as the database would return it."""
    return ResourceUsageModel(
        id=uuid4(),
        company_id=company_id,
        tenant_id=tenant_id,
        resource_type=resource_type.value,
        current_value=current_value,
        max_value=max_value,
        unit=unit.value,
        reset_policy=reset_policy.value,
        period_start=period_start,
        period_end=period_end,
        last_updated=period_start,
        status=status.value,
        version=version,
    )


@pytest.fixture
def db():
    """Session stand-in; fakes never touch it beyond rollback()."""
    return AsyncMock()
