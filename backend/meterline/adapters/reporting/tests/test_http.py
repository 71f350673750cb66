"""Unit tests for HttpUsageReportGenerator against a mocked transport."""

import json
from datetime import datetime, timezone
from unittest.mock import patch

import httpx
import pytest

from meterline.adapters.reporting.http import HttpUsageReportGenerator
from meterline.adapters.reporting.null import NullUsageReportGenerator
from meterline.core.exceptions import ExternalServiceError
from meterline.domains.usage.types import TimeUnit

URL = "http://reports.test/generate"
START = datetime(2024, 1, 1, tzinfo=timezone.utc)
END = datetime(2024, 1, 31, tzinfo=timezone.utc)

_RealAsyncClient = httpx.AsyncClient


def _patched_client(handler):
    """Patch httpx.AsyncClient so the generator talks to *handler*."""
    transport = httpx.MockTransport(handler)
    return patch(
        "meterline.adapters.reporting.http.httpx.AsyncClient",
        lambda **kwargs: _RealAsyncClient(transport=transport, **kwargs),
    )


async def _generate():
    return await HttpUsageReportGenerator(URL, timeout=5).generate_usage_report(
        "acme", TimeUnit.MONTHLY, START, END
    )


class TestGenerateUsageReport:
    @pytest.mark.asyncio
    async def test_posts_request_and_returns_body(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"rows": [1, 2]})

        with _patched_client(handler):
            report = await _generate()

        assert report == {"rows": [1, 2]}
        assert seen == [
            {
                "companyId": "acme",
                "period": "monthly",
                "startDate": START.isoformat(),
                "endDate": END.isoformat(),
            }
        ]

    @pytest.mark.asyncio
    async def test_unwraps_data_envelope(self):
        with _patched_client(lambda request: httpx.Response(200, json={"data": {"total": 3}})):
            assert await _generate() == {"total": 3}

    @pytest.mark.asyncio
    async def test_non_object_data_is_wrapped(self):
        with _patched_client(lambda request: httpx.Response(200, json={"data": [1]})):
            assert await _generate() == {"data": [1]}

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        with _patched_client(lambda request: httpx.Response(503)):
            with pytest.raises(ExternalServiceError, match="503"):
                await _generate()

    @pytest.mark.asyncio
    async def test_connection_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with _patched_client(handler):
            with pytest.raises(ExternalServiceError, match="Report request failed"):
                await _generate()

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with _patched_client(handler):
            with pytest.raises(ExternalServiceError, match="timed out"):
                await _generate()

    @pytest.mark.asyncio
    async def test_non_json_body_raises(self):
        with _patched_client(lambda request: httpx.Response(200, text="<html>")):
            with pytest.raises(ExternalServiceError, match="not JSON"):
                await _generate()

    @pytest.mark.asyncio
    async def test_json_array_body_raises(self):
        with _patched_client(lambda request: httpx.Response(200, json=[1, 2])):
            with pytest.raises(ExternalServiceError, match="not a JSON object"):
                await _generate()


class TestNullGenerator:
    @pytest.mark.asyncio
    async def test_always_fails(self):
        with pytest.raises(ExternalServiceError, match="No report service configured"):
            await NullUsageReportGenerator().generate_usage_report(
                "acme", TimeUnit.DAILY, START, END
            )
