"""Fake event bus for testing.

Records published events for assertions without calling real subscribers.
"""

import fnmatch
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from meterline.core.protocols.event_bus import DomainEvent, EventHandler


def _type_of(event: "DomainEvent") -> str:
    return str(getattr(event.event_type, "value", event.event_type))


class FakeEventBus:
    """Test implementation of EventBus.

    Usage:
        fake = FakeEventBus()
        dispatcher = EventBusAlertDispatcher(fake)
        await dispatcher.dispatch_alert(...)
        await dispatcher.drain()

        event = fake.assert_published("usage.limit_exceeded")
        assert event.resource_type == ResourceType.API_CALLS
    """

    def __init__(self, call_subscribers: bool = False) -> None:
        """Initialize the fake event bus.

        Args:
            call_subscribers: If True, actually call registered subscribers.
        """
        self.events: list["DomainEvent"] = []
        self._subscribers: list[tuple[str, "EventHandler"]] = []
        self._call_subscribers = call_subscribers

    def subscribe(self, event_pattern: str, handler: "EventHandler") -> None:
        """Register a handler (only called if call_subscribers=True)."""
        self._subscribers.append((event_pattern, handler))

    async def publish(self, event: "DomainEvent") -> None:
        """Record the event (and optionally call subscribers)."""
        self.events.append(event)
        if self._call_subscribers:
            for pattern, handler in self._subscribers:
                if fnmatch.fnmatch(_type_of(event), pattern):
                    await handler(event)

    # Test helpers

    def get_events(self, event_type: str) -> list["DomainEvent"]:
        """All recorded events of *event_type*, in publish order."""
        return [e for e in self.events if _type_of(e) == event_type]

    def has_event(self, event_type: str) -> bool:
        """Check if an event of the given type was published."""
        return bool(self.get_events(event_type))

    def assert_published(self, event_type: str) -> "DomainEvent":
        """Assert that an event was published and return the first one."""
        matches = self.get_events(event_type)
        if not matches:
            published = [_type_of(e) for e in self.events]
            raise AssertionError(
                f"Expected event '{event_type}' was not published. Published events: {published}"
            )
        return matches[0]

    def assert_not_published(self, event_type: str) -> None:
        """Assert that an event was NOT published."""
        if self.has_event(event_type):
            raise AssertionError(f"Event '{event_type}' was published but should not have been")

    def clear(self) -> None:
        """Clear all recorded events."""
        self.events.clear()
