"""Usage report schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from meterline.domains.usage.types import TimeUnit


class UsageReport(BaseModel):
    """Report produced by the external report generator."""

    company_id: str
    period: TimeUnit
    start_date: datetime
    end_date: datetime
    report: dict[str, Any]
