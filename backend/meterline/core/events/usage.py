"""Usage metering domain events.

Published by the event-bus alert dispatcher when a tracked call pushes a
resource at or above its alert threshold, or is rejected for exceeding its
limit. Consumed by the alert webhook subscriber.
"""

from typing import Optional

from meterline.core.events.base import DomainEvent
from meterline.core.events.enums import UsageEventType
from meterline.domains.usage.types import ResourceType


class UsageAlertEvent(DomainEvent):
    """Threshold or overage alert for one (company, resource) pair."""

    event_type: UsageEventType

    tenant_id: str
    resource_type: ResourceType
    current_value: float
    max_value: float
    amount: Optional[float] = None
    percent_used: Optional[float] = None

    @property
    def is_overage(self) -> bool:
        """True for a rejected call, False for an approaching-limit warning."""
        return self.event_type == UsageEventType.LIMIT_EXCEEDED

    @classmethod
    def approaching_limit(
        cls,
        company_id: str,
        tenant_id: str,
        resource_type: ResourceType,
        current_value: float,
        max_value: float,
        percent_used: Optional[float] = None,
    ) -> "UsageAlertEvent":
        """Create an APPROACHING_LIMIT event (usage at or above the alert threshold)."""
        return cls(
            event_type=UsageEventType.APPROACHING_LIMIT,
            company_id=company_id,
            tenant_id=tenant_id,
            resource_type=resource_type,
            current_value=current_value,
            max_value=max_value,
            percent_used=percent_used,
        )

    @classmethod
    def limit_exceeded(
        cls,
        company_id: str,
        tenant_id: str,
        resource_type: ResourceType,
        current_value: float,
        max_value: float,
        amount: Optional[float] = None,
    ) -> "UsageAlertEvent":
        """Create a LIMIT_EXCEEDED event (call rejected, counter unchanged)."""
        return cls(
            event_type=UsageEventType.LIMIT_EXCEEDED,
            company_id=company_id,
            tenant_id=tenant_id,
            resource_type=resource_type,
            current_value=current_value,
            max_value=max_value,
            amount=amount,
        )
