"""CRUD operations for the application."""

from .crud_company import company
from .crud_resource_limit import resource_limit_set
from .crud_resource_usage import resource_usage
from .crud_usage_record import usage_record
from .crud_usage_summary import usage_summary

__all__ = [
    "company",
    "resource_limit_set",
    "resource_usage",
    "usage_record",
    "usage_summary",
]
