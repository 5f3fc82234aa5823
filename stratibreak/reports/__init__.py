"""Report generation for Stratibreak."""

from stratibreak.reports.gap_report import GapReportGenerator
from stratibreak.reports.severity_report import SeverityReportGenerator

__all__ = ["GapReportGenerator", "SeverityReportGenerator"]
