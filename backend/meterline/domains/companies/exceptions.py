"""Company domain exceptions."""

from meterline.core.exceptions import NotFoundException


class CompanyNotFoundError(NotFoundException):
    """Raised when a company is not in the directory."""

    def __init__(self, company_id: str):
        """Initialize with the missing company ID."""
        self.company_id = company_id
        super().__init__(f"Company not found: {company_id}")
