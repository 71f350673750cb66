"""CRUD operations for the Company model."""

from meterline.crud._base import CRUDBase
from meterline.models.company import Company
from meterline.schemas.company import CompanyCreate


class CRUDCompany(CRUDBase[Company, CompanyCreate]):
    """CRUD operations for the Company model."""


company = CRUDCompany(Company)
