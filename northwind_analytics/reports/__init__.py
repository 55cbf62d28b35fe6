"""
Report Catalog Module

Importing this package registers all twenty reports.
"""
from .catalog import ReportDefinition, get_report, list_reports, register_report, report_names
from . import customers, products, revenue, operations  # noqa: F401  (registration)
from .runner import ReportResult, ReportRunner, diff

__all__ = [
    "ReportDefinition",
    "get_report",
    "list_reports",
    "register_report",
    "report_names",
    "ReportResult",
    "ReportRunner",
    "diff",
]
