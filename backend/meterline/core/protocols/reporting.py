"""Usage report generator protocol.

Report generation is delegated entirely to an external job. The metering
service only forwards the request and surfaces failure.
"""

from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from meterline.domains.usage.types import TimeUnit


@runtime_checkable
class UsageReportGenerator(Protocol):
    """Produces aggregated usage reports for a company."""

    async def generate_usage_report(
        self,
        company_id: str,
        period: TimeUnit,
        start_date: datetime,
        end_date: datetime,
    ) -> dict[str, Any]:
        """Generate a report bucketed by *period* over [start_date, end_date].

        Raises:
            ExternalServiceError: If the generator is unreachable or fails.
        """
        ...
