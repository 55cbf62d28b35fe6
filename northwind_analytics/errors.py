"""Exceptions raised by the Northwind analytics engine.

Hierarchy:
- NorthwindAnalyticsError (base)
- UnknownReportError
- SchemaMismatchError
- TypeMismatchError
- SnapshotIntegrityError

All errors are raised synchronously to the caller. Averages over empty groups
are not errors: they evaluate to null.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

__all__ = [
    "NorthwindAnalyticsError",
    "UnknownReportError",
    "SchemaMismatchError",
    "TypeMismatchError",
    "SnapshotIntegrityError",
]


class NorthwindAnalyticsError(Exception):
    """Base class for all engine errors.

    Carries a machine-readable ``code`` and a ``details`` mapping so outer
    surfaces (CLI, HTTP) can report errors without parsing messages.
    """

    code = "analytics_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


class UnknownReportError(NorthwindAnalyticsError):
    """Requested report name is not in the catalog.

    Example:
        >>> try:
        ...     runner.run("top_widgets", snapshot)
        ... except UnknownReportError as e:
        ...     print(e.available)
    """

    code = "UnknownReport"

    def __init__(self, report_name: str, available: Iterable[str] = ()) -> None:
        self.report_name = report_name
        self.available = sorted(available)
        super().__init__(
            f"Unknown report: {report_name}",
            details={"report": report_name, "available": self.available},
        )


class SchemaMismatchError(NorthwindAnalyticsError):
    """Tables or columns required by a computation are absent.

    ``missing`` maps table name to the list of missing columns; an empty list
    means the whole table is missing.
    """

    code = "SchemaMismatch"

    def __init__(
        self,
        missing: Mapping[str, List[str]],
        message: Optional[str] = None,
        *,
        report: Optional[str] = None,
    ) -> None:
        self.missing = {table: list(cols) for table, cols in missing.items()}
        self.report = report
        parts = []
        for table, cols in sorted(self.missing.items()):
            if cols:
                parts.append(f"{table}({', '.join(cols)})")
            else:
                parts.append(table)
        msg = message or f"Missing tables/columns: {'; '.join(parts)}"
        details: Dict[str, Any] = {"missing": self.missing}
        if report:
            details["report"] = report
        super().__init__(msg, details=details)


class TypeMismatchError(NorthwindAnalyticsError):
    """A column's dtype disagrees with what the operation needs.

    Raised when join keys have different dtypes, or when a loaded column
    cannot be cast to its canonical dtype.
    """

    code = "TypeMismatch"

    def __init__(
        self,
        message: str,
        *,
        column: Optional[str] = None,
        expected_type: Optional[str] = None,
        actual_type: Optional[str] = None,
    ) -> None:
        details: Dict[str, str] = {}
        if column:
            details["column"] = column
        if expected_type:
            details["expected_type"] = expected_type
        if actual_type:
            details["actual_type"] = actual_type
        super().__init__(message, details=details)
        self.column = column
        self.expected_type = expected_type
        self.actual_type = actual_type


class SnapshotIntegrityError(NorthwindAnalyticsError):
    """Snapshot failed its integrity checks (keys, ranges, foreign keys)."""

    code = "SnapshotIntegrity"

    def __init__(self, failed_checks: List[str], message: Optional[str] = None) -> None:
        self.failed_checks = list(failed_checks)
        super().__init__(
            message or f"Snapshot failed {len(self.failed_checks)} integrity check(s): {', '.join(self.failed_checks)}",
            details={"failed_checks": self.failed_checks},
        )
