"""Company directory: company -> tenant resolution."""

from sqlalchemy.ext.asyncio import AsyncSession

from meterline.domains.companies.exceptions import CompanyNotFoundError
from meterline.domains.companies.protocols import (
    CompanyDirectoryProtocol,
    CompanyRepositoryProtocol,
)


class CompanyDirectory(CompanyDirectoryProtocol):
    """Looks companies up in the company table.

    A company without an explicit tenant is its own tenant.
    """

    def __init__(self, company_repo: CompanyRepositoryProtocol) -> None:
        """Initialize with the company repository."""
        self._company_repo = company_repo

    async def resolve_tenant_id(self, db: AsyncSession, company_id: str) -> str:
        """Return the tenant of *company_id*, failing if it is unknown."""
        company = await self._company_repo.get(db, company_id=company_id)
        if company is None:
            raise CompanyNotFoundError(company_id)
        return company.tenant_id or company.id
