"""Unit tests for UsageAlertWebhookSubscriber."""

import json

import httpx
import pytest

from meterline.adapters.event_bus.fake import FakeEventBus
from meterline.core.events.base import DomainEvent
from meterline.core.events.enums import UsageEventType
from meterline.core.events.usage import UsageAlertEvent
from meterline.domains.usage.subscribers.alert_webhook import UsageAlertWebhookSubscriber
from meterline.domains.usage.types import ResourceType

URL = "http://alerts.test/hook"


def _approaching() -> UsageAlertEvent:
    return UsageAlertEvent.approaching_limit(
        company_id="acme",
        tenant_id="tenant-1",
        resource_type=ResourceType.API_CALLS,
        current_value=85,
        max_value=100,
        percent_used=85.0,
    )


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestHandle:
    @pytest.mark.asyncio
    async def test_posts_event_as_json(self):
        seen = []

        def handler(request):
            seen.append((str(request.url), json.loads(request.content)))
            return httpx.Response(204)

        async with _client(handler) as client:
            await UsageAlertWebhookSubscriber(URL, client=client).handle(_approaching())

        [(url, body)] = seen
        assert url == URL
        assert body["event_type"] == "usage.approaching_limit"
        assert body["resource_type"] == "api_calls"
        assert body["percent_used"] == 85.0

    @pytest.mark.asyncio
    async def test_delivery_failure_is_swallowed(self):
        async with _client(lambda request: httpx.Response(500)) as client:
            await UsageAlertWebhookSubscriber(URL, client=client).handle(_approaching())

    @pytest.mark.asyncio
    async def test_ignores_other_events(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        event = DomainEvent(event_type=UsageEventType.LIMIT_EXCEEDED, company_id="acme")
        async with _client(handler) as client:
            await UsageAlertWebhookSubscriber(URL, client=client).handle(event)

        assert calls == []


class TestSubscription:
    @pytest.mark.asyncio
    async def test_receives_usage_events_from_bus(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200)

        bus = FakeEventBus(call_subscribers=True)
        async with _client(handler) as client:
            subscriber = UsageAlertWebhookSubscriber(URL, client=client)
            for pattern in subscriber.EVENT_PATTERNS:
                bus.subscribe(pattern, subscriber.handle)
            await bus.publish(_approaching())

        assert len(seen) == 1
