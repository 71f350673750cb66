"""Fake alert dispatcher for testing."""

from dataclasses import dataclass
from typing import Optional

from meterline.core.protocols.alerts import AlertDispatcher
from meterline.domains.usage.types import AlertKind, ResourceType


@dataclass(frozen=True)
class DispatchedAlert:
    """One recorded dispatch_alert() call."""

    company_id: str
    tenant_id: str
    resource_type: ResourceType
    current_value: float
    max_value: float
    kind: AlertKind
    amount: Optional[float] = None
    percent_used: Optional[float] = None


class FakeAlertDispatcher(AlertDispatcher):
    """Test implementation of AlertDispatcher.

    Records every alert; optionally raises to exercise the ledger's
    fire-and-forget handling.

    Usage:
        alerts = FakeAlertDispatcher()
        await ledger.track_usage(db, "c1", ResourceType.API_CALLS, amount=20)
        assert alerts.of_kind(AlertKind.OVERAGE)[0].amount == 20
    """

    def __init__(self, fail_with: Optional[Exception] = None) -> None:
        """Initialize with an optional exception to raise on every dispatch."""
        self.alerts: list[DispatchedAlert] = []
        self._fail_with = fail_with

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
        """Record the alert, then raise if configured to fail."""
        self.alerts.append(
            DispatchedAlert(
                company_id=company_id,
                tenant_id=tenant_id,
                resource_type=resource_type,
                current_value=current_value,
                max_value=max_value,
                kind=kind,
                amount=amount,
                percent_used=percent_used,
            )
        )
        if self._fail_with is not None:
            raise self._fail_with

    def of_kind(self, kind: AlertKind) -> list[DispatchedAlert]:
        """Recorded alerts of one kind."""
        return [a for a in self.alerts if a.kind == kind]

    def clear(self) -> None:
        """Forget all recorded alerts."""
        self.alerts.clear()

    async def drain(self) -> None:
        """Alerts are recorded synchronously; nothing is pending."""
