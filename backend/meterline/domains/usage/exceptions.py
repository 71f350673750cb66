"""Usage domain exceptions."""

from meterline.core.exceptions import (
    ExternalServiceError,
    InvalidStateError,
    MeterlineException,
    NotFoundException,
)


class LedgerConflictError(MeterlineException):
    """Raised when a ledger write loses an optimistic-concurrency race.

    Retried by the ledger; only surfaces once every attempt has lost.
    """

    def __init__(self, company_id: str, resource_type: str) -> None:
        """Initialize with the contended key."""
        self.company_id = company_id
        self.resource_type = resource_type
        super().__init__(
            f"Concurrent update of usage for company {company_id}, resource {resource_type}"
        )


class ResourceUsageNotFoundError(NotFoundException):
    """Raised when a company has no ledger entry for a resource."""

    def __init__(self, company_id: str, resource_type: str) -> None:
        """Initialize with the missing key."""
        self.company_id = company_id
        self.resource_type = resource_type
        super().__init__(f"No usage tracked for resource {resource_type} of company {company_id}")


class InvalidLimitConfigurationError(InvalidStateError):
    """Raised when a limit set cannot be stored as given."""

    def __init__(self, message: str = "Invalid resource limit configuration"):
        """Initialize with default message."""
        super().__init__(message)


class UsageReportError(ExternalServiceError):
    """Wraps any report generator failure at the domain boundary."""

    def __init__(self, message: str = "Failed to generate usage report"):
        """Initialize with default message."""
        super().__init__(service_name="UsageReportGenerator", message=message)
