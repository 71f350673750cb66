"""Usage report generator adapters."""

from meterline.adapters.reporting.fake import FakeUsageReportGenerator
from meterline.adapters.reporting.http import HttpUsageReportGenerator
from meterline.adapters.reporting.null import NullUsageReportGenerator

__all__ = ["FakeUsageReportGenerator", "HttpUsageReportGenerator", "NullUsageReportGenerator"]
