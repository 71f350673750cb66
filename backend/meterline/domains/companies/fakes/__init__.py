"""Fakes for the companies domain."""

from meterline.domains.companies.fakes.directory import FakeCompanyDirectory
from meterline.domains.companies.fakes.repository import FakeCompanyRepository

__all__ = ["FakeCompanyDirectory", "FakeCompanyRepository"]
