"""Alert webhook subscriber: forwards usage alerts to an HTTP endpoint."""

import logging
from typing import List, Optional

import httpx

from meterline.core.events.base import DomainEvent
from meterline.core.events.usage import UsageAlertEvent
from meterline.core.protocols.event_bus import EventSubscriber

logger = logging.getLogger(__name__)


class UsageAlertWebhookSubscriber(EventSubscriber):
    """POSTs every usage alert event as JSON to a configured URL.

    Delivery failures are logged and dropped without retry.
    """

    EVENT_PATTERNS: List[str] = ["usage.*"]

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize with the target URL and request timeout."""
        self._url = url
        self._timeout = timeout_seconds
        self._client = client

    async def handle(self, event: DomainEvent) -> None:
        """Deliver a usage alert event."""
        if not isinstance(event, UsageAlertEvent):
            return

        payload = event.model_dump(mode="json")
        try:
            if self._client is not None:
                response = await self._client.post(self._url, json=payload, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                f"Usage alert delivery failed for company {event.company_id} "
                f"({event.event_type.value}): {e}",
                exc_info=True,
            )
            return

        logger.debug(f"Delivered {event.event_type.value} alert for company {event.company_id}")
