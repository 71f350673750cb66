"""HTTP client for the external usage report generator.

POSTs the report request as JSON and returns the decoded JSON body.
Implements the UsageReportGenerator protocol.
"""

from datetime import datetime
from typing import Any

import httpx

from meterline.core.exceptions import ExternalServiceError
from meterline.core.protocols.reporting import UsageReportGenerator
from meterline.domains.usage.types import TimeUnit

_SERVICE_NAME = "usage-report-generator"


class HttpUsageReportGenerator(UsageReportGenerator):
    """Delegates report generation to a remote job over HTTP."""

    def __init__(self, url: str, timeout: float = 30.0) -> None:
        """Initialize with the generator endpoint and a request timeout in seconds."""
        self._url = url
        self._timeout = timeout

    async def generate_usage_report(
        self,
        company_id: str,
        period: TimeUnit,
        start_date: datetime,
        end_date: datetime,
    ) -> dict[str, Any]:
        """Request a report and return the generator's JSON response.

        Raises:
            ExternalServiceError: On timeout, connection failure, a non-2xx
                status, or a body that is not a JSON object.
        """
        payload = {
            "companyId": company_id,
            "period": period.value,
            "startDate": start_date.isoformat(),
            "endDate": end_date.isoformat(),
        }
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.post(self._url, json=payload)
                response.raise_for_status()
            except httpx.TimeoutException as exc:
                raise ExternalServiceError(_SERVICE_NAME, "Report generation timed out") from exc
            except httpx.HTTPStatusError as exc:
                raise ExternalServiceError(
                    _SERVICE_NAME, f"Report generator returned {exc.response.status_code}"
                ) from exc
            except httpx.HTTPError as exc:
                raise ExternalServiceError(_SERVICE_NAME, f"Report request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise ExternalServiceError(_SERVICE_NAME, "Report response was not JSON") from exc
        if not isinstance(body, dict):
            raise ExternalServiceError(_SERVICE_NAME, "Report response was not a JSON object")
        # Callable-style endpoints wrap their result in {"data": ...}
        data = body.get("data", body)
        return data if isinstance(data, dict) else {"data": data}
