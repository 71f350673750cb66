"""Alert dispatcher that publishes usage alerts on the event bus.

Subscribers (the alert webhook, analytics) decide how alerts leave the
process. Publishing runs as a background task: dispatch_alert returns once
the event is scheduled, so subscriber latency never holds up admission.
"""

import asyncio
import logging
from typing import Optional

from meterline.core.events.usage import UsageAlertEvent
from meterline.core.protocols.alerts import AlertDispatcher
from meterline.core.protocols.clock import Clock
from meterline.core.protocols.event_bus import EventBus
from meterline.domains.usage.types import AlertKind, ResourceType

logger = logging.getLogger(__name__)


class EventBusAlertDispatcher(AlertDispatcher):
    """Maps each alert onto a UsageAlertEvent and publishes it in the background."""

    def __init__(self, event_bus: EventBus, clock: Optional[Clock] = None) -> None:
        """Initialize with the bus to publish on and the clock that stamps events."""
        self._event_bus = event_bus
        self._clock = clock
        # Strong references keep scheduled publishes alive until they finish.
        self._pending: set[asyncio.Task] = set()

    async def dispatch_alert(
        self,
        company_id: str,
        tenant_id: str,
        resource_type: ResourceType,
        current_value: float,
        max_value: float,
        kind: AlertKind,
        amount: Optional[float] = None,
        percent_used: Optional[float] = None,
    ) -> None:
        """Schedule an approaching-limit or limit-exceeded event for publishing."""
        if kind == AlertKind.OVERAGE:
            event = UsageAlertEvent.limit_exceeded(
                company_id=company_id,
                tenant_id=tenant_id,
                resource_type=resource_type,
                current_value=current_value,
                max_value=max_value,
                amount=amount,
            )
        else:
            event = UsageAlertEvent.approaching_limit(
                company_id=company_id,
                tenant_id=tenant_id,
                resource_type=resource_type,
                current_value=current_value,
                max_value=max_value,
                percent_used=percent_used,
            )
        if self._clock is not None:
            event = event.model_copy(update={"timestamp": self._clock.now()})

        task = asyncio.create_task(
            self._event_bus.publish(event),
            name=f"usage-alert-{kind.value}-{company_id}",
        )
        self._pending.add(task)
        task.add_done_callback(self._on_published)

    @property
    def pending(self) -> int:
        """Number of alerts scheduled but not yet published."""
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled publish to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _on_published(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning(f"Alert publish cancelled: {task.get_name()}")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Alert publish failed: {task.get_name()}: {exc}", exc_info=exc)
