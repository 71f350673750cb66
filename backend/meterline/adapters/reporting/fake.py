"""Fake usage report generator for testing."""

from datetime import datetime
from typing import Any, Optional

from meterline.core.protocols.reporting import UsageReportGenerator
from meterline.domains.usage.types import TimeUnit


class FakeUsageReportGenerator(UsageReportGenerator):
    """Returns a canned report and records requests."""

    def __init__(
        self,
        report: Optional[dict[str, Any]] = None,
        fail_with: Optional[Exception] = None,
    ) -> None:
        """Initialize with the report to return, or an exception to raise."""
        self.report = report if report is not None else {"rows": []}
        self.requests: list[tuple[str, TimeUnit, datetime, datetime]] = []
        self.fail_with = fail_with

    async def generate_usage_report(
        self,
        company_id: str,
        period: TimeUnit,
        start_date: datetime,
        end_date: datetime,
    ) -> dict[str, Any]:
        """Record the request and return the canned report."""
        self.requests.append((company_id, period, start_date, end_date))
        if self.fail_with is not None:
            raise self.fail_with
        return self.report
