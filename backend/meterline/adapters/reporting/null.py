"""Report generator used when no report service is configured."""

from datetime import datetime
from typing import Any

from meterline.core.exceptions import ExternalServiceError
from meterline.core.protocols.reporting import UsageReportGenerator
from meterline.domains.usage.types import TimeUnit


class NullUsageReportGenerator(UsageReportGenerator):
    """Always fails; reports need USAGE_REPORT_SERVICE_URL."""

    async def generate_usage_report(
        self,
        company_id: str,
        period: TimeUnit,
        start_date: datetime,
        end_date: datetime,
    ) -> dict[str, Any]:
        """Raise ExternalServiceError."""
        raise ExternalServiceError("usage-report-generator", "No report service configured")
