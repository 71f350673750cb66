"""Alert dispatcher protocol.

The usage ledger notifies this collaborator when a tracked call leaves a
resource at or above its alert threshold, or is rejected for exceeding its
limit. dispatch_alert hands the alert off and returns; the ledger never
waits on delivery to decide admission.
"""

from typing import Optional, Protocol, runtime_checkable

from meterline.domains.usage.types import AlertKind, ResourceType


@runtime_checkable
class AlertDispatcher(Protocol):
    """Delivers usage alerts to whoever needs to hear about them."""

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
        """Dispatch one alert.

        Args:
            company_id: Company the resource belongs to.
            tenant_id: Tenant of the company.
            resource_type: The metered resource.
            current_value: Counter value the alert refers to. For overage this is
                the value before the rejected call; for approaching it is the
                value after the admitted call.
            max_value: Configured limit.
            kind: APPROACHING or OVERAGE.
            amount: Size of the rejected call (overage only).
            percent_used: Usage percentage after the call (approaching only).
        """
        ...

    async def drain(self) -> None:
        """Wait for alerts that were accepted but not yet delivered."""
        ...
