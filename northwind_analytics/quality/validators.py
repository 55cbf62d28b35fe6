"""
Snapshot Integrity Validation

Rule-based checks for the invariants every report relies on:
- Keys are present and unique
- Discounts lie in [0, 1] and quantities are positive
- Every foreign key resolves within the snapshot

Checks are registered on a DataValidator per table and run against that
table; referential checks receive the parent table up front.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

import polars as pl
import structlog

from northwind_analytics.data.schema import FOREIGN_KEYS, PRIMARY_KEYS
from northwind_analytics.data.snapshot import Snapshot
from northwind_analytics.errors import SnapshotIntegrityError

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"
    WARNING = "warning"


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100

    @property
    def failures(self) -> List[ValidationCheck]:
        return [c for c in self.checks if not c.passed and c.severity == ValidationSeverity.ERROR]


def _missing_column_check(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
    return ValidationCheck(
        name=name,
        passed=False,
        severity=severity,
        message=f"Column '{column}' not found",
    )


class DataValidator:
    """
    Check suite for a single table.

    Example:
        validator = DataValidator("order_details")
        validator.add_range_check("discount", min_value=0, max_value=1)
        result = validator.validate(df)
    """

    def __init__(self, table: str = "table"):
        self.table = table
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        name = f"{self.table}.not_null_{column}"

        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return _missing_column_check(name, column, severity)

            null_count = df[column].null_count()
            passed = null_count == 0
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values" if not passed else f"Column '{column}' has no null values",
                details={"null_count": null_count},
                failed_rows=null_count,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_unique_check(
        self,
        columns: Sequence[str],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add uniqueness check over one or more key columns"""
        columns = list(columns)
        name = f"{self.table}.unique_{'_'.join(columns)}"

        def check(df: pl.DataFrame) -> ValidationCheck:
            absent = [c for c in columns if c not in df.columns]
            if absent:
                return _missing_column_check(name, absent[0], severity)

            total = len(df)
            duplicate_count = total - df.select(columns).unique().height
            passed = duplicate_count == 0
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Key {columns} has {duplicate_count} duplicate rows" if not passed else f"Key {columns} is unique",
                details={"duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        exclusive_min: bool = False,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within [min_value, max_value]"""
        name = f"{self.table}.range_{column}"

        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return _missing_column_check(name, column, severity)

            conditions = []
            if min_value is not None:
                conditions.append(pl.col(column) <= min_value if exclusive_min else pl.col(column) < min_value)
            if max_value is not None:
                conditions.append(pl.col(column) > max_value)

            if not conditions:
                return ValidationCheck(name=name, passed=True, severity=severity, message="No range specified")

            combined = conditions[0]
            for cond in conditions[1:]:
                combined = combined | cond

            out_of_range = df.filter(combined).height
            passed = out_of_range == 0
            lower = "(" if exclusive_min else "["
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside {lower}{min_value}, {max_value}]" if not passed else "All values in range",
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_referential_integrity_check(
        self,
        column: str,
        reference_df: pl.DataFrame,
        reference_column: str,
        reference_table: str = "reference",
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that every non-null value of ``column`` exists in the parent"""
        name = f"{self.table}.ref_integrity_{column}"

        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return _missing_column_check(name, column, severity)
            if reference_column not in reference_df.columns:
                return _missing_column_check(name, f"{reference_table}.{reference_column}", severity)

            orphans = df.filter(
                ~pl.col(column).is_in(reference_df[reference_column]) & pl.col(column).is_not_null()
            ).height
            passed = orphans == 0
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {orphans} values missing from {reference_table}.{reference_column}" if not passed else "Referential integrity maintained",
                details={"orphan_count": orphans, "reference": f"{reference_table}.{reference_column}"},
                failed_rows=orphans,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def run_checks(self, df: pl.DataFrame) -> List[ValidationCheck]:
        results = []
        for check_func in self._checks:
            result = check_func(df)
            results.append(result)
            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    message=result.message,
                    severity=result.severity.value,
                )
        return results

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on DataFrame.

        Args:
            df: DataFrame to validate

        Returns:
            ValidationResult with all check results
        """
        started_at = datetime.now(timezone.utc)
        return summarize(self.run_checks(df), started_at)


def summarize(results: List[ValidationCheck], started_at: datetime) -> ValidationResult:
    """Fold individual check results into a ValidationResult"""
    passed_checks = sum(1 for r in results if r.passed)
    failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
    warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

    if failed_checks > 0:
        status = ValidationStatus.FAILED
    elif warning_count > 0:
        status = ValidationStatus.PARTIAL
    else:
        status = ValidationStatus.PASSED

    return ValidationResult(
        status=status,
        total_checks=len(results),
        passed_checks=passed_checks,
        failed_checks=failed_checks,
        warning_count=warning_count,
        checks=results,
        started_at=started_at,
        completed_at=datetime.now(timezone.utc),
    )


def build_validators(snapshot: Snapshot) -> Dict[str, DataValidator]:
    """Pre-configured validators for every table present in the snapshot"""
    validators: Dict[str, DataValidator] = {}
    for table, key in PRIMARY_KEYS.items():
        if not snapshot.has_table(table):
            continue
        validator = DataValidator(table)
        for column in key:
            validator.add_not_null_check(column)
        validator.add_unique_check(key)
        validators[table] = validator

    if "order_details" in validators:
        (
            validators["order_details"]
            .add_range_check("discount", min_value=0, max_value=1)
            .add_range_check("quantity", min_value=0, exclusive_min=True)
        )

    for child, column, parent, parent_column in FOREIGN_KEYS:
        if child in validators and snapshot.has_table(parent):
            validators[child].add_referential_integrity_check(
                column,
                snapshot.table(parent),
                parent_column,
                reference_table=parent,
            )
    return validators


def validate_snapshot(snapshot: Snapshot, raise_on_failure: bool = False) -> ValidationResult:
    """
    Check a snapshot's keys, value ranges and foreign keys.

    Args:
        snapshot: Snapshot to validate
        raise_on_failure: Raise SnapshotIntegrityError instead of returning
            a failed result

    Returns:
        ValidationResult covering every table present in the snapshot
    """
    started_at = datetime.now(timezone.utc)
    validators = build_validators(snapshot)

    results: List[ValidationCheck] = []
    for table, validator in validators.items():
        results.extend(validator.run_checks(snapshot.table(table)))

    result = summarize(results, started_at)

    logger.info(
        f"Snapshot validation complete: {result.status.value}",
        snapshot_id=snapshot.snapshot_id,
        passed=result.passed_checks,
        failed=result.failed_checks,
    )

    if raise_on_failure and result.status == ValidationStatus.FAILED:
        raise SnapshotIntegrityError([c.name for c in result.failures])
    return result
