"""
Northwind Analytics

Business reports over an in-memory Northwind Traders snapshot.
"""
from .data import Snapshot, load_snapshot, load_snapshot_from_directory
from .errors import (
    NorthwindAnalyticsError,
    SchemaMismatchError,
    SnapshotIntegrityError,
    TypeMismatchError,
    UnknownReportError,
)
from .reports import ReportResult, ReportRunner, diff, list_reports, report_names

__version__ = "1.0.0"

__all__ = [
    "Snapshot",
    "load_snapshot",
    "load_snapshot_from_directory",
    "NorthwindAnalyticsError",
    "SchemaMismatchError",
    "SnapshotIntegrityError",
    "TypeMismatchError",
    "UnknownReportError",
    "ReportResult",
    "ReportRunner",
    "diff",
    "list_reports",
    "report_names",
]
