"""Company repository wrapping crud.company."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from meterline import crud
from meterline.domains.companies.protocols import CompanyRepositoryProtocol
from meterline.models.company import Company


class CompanyRepository(CompanyRepositoryProtocol):
    """Delegates to the crud.company singleton."""

    async def get(self, db: AsyncSession, *, company_id: str) -> Optional[Company]:
        """Get a company by ID."""
        return await crud.company.get(db, company_id)
