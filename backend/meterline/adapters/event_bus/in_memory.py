"""In-memory event bus implementation.

Fans usage events out to subscribers inside the current process. A
distributed bus can replace it behind the same EventBus protocol.
"""

import asyncio
import fnmatch
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from meterline.core.protocols.event_bus import DomainEvent, EventHandler

# Use standard logging to avoid circular import with meterline.core.logging
logger = logging.getLogger(__name__)


class InMemoryEventBus:
    """Pattern-matching event bus that awaits all matching handlers.

    Usage:
        bus = InMemoryEventBus()
        bus.subscribe("usage.*", alert_webhook.handle)
        await bus.publish(UsageAlertEvent.limit_exceeded(...))
    """

    def __init__(self) -> None:
        """Start with no subscriptions."""
        self._subscribers: list[tuple[str, "EventHandler"]] = []

    def subscribe(self, event_pattern: str, handler: "EventHandler") -> None:
        """Register *handler* for event types matching the glob *event_pattern*."""
        self._subscribers.append((event_pattern, handler))
        logger.debug(f"EventBus: subscribed handler to '{event_pattern}'")

    async def publish(self, event: "DomainEvent") -> None:
        """Deliver *event* to every matching handler concurrently.

        A failing handler is logged; the remaining handlers still run and
        nothing is raised to the publisher.
        """
        event_type = str(getattr(event.event_type, "value", event.event_type))
        handlers = [h for pattern, h in self._subscribers if fnmatch.fnmatch(event_type, pattern)]

        if not handlers:
            logger.warning(f"EventBus: no subscribers for '{event_type}'")
            return

        logger.debug(f"EventBus: publishing '{event_type}' to {len(handlers)} subscribers")

        results = await asyncio.gather(*(h(event) for h in handlers), return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.error(
                    f"EventBus: subscriber failed for '{event_type}': {result}",
                    exc_info=result,
                )
