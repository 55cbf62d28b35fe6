"""
Report Runner

Executes catalog reports against a snapshot and compares results of two
runs of the same report.

Reports are pure functions of an immutable snapshot, so ``run_all`` may
dispatch them to a thread pool without any coordination.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
import time
from typing import Any, Dict, List, Optional, Sequence

import polars as pl
import structlog

from northwind_analytics.config import get_settings
from northwind_analytics.config.logging import report_context
from northwind_analytics.data.snapshot import Snapshot
from northwind_analytics.errors import SchemaMismatchError
from .catalog import ReportDefinition, get_report, list_reports

logger = structlog.get_logger(__name__)


@dataclass
class ReportResult:
    """Result table of one report run"""
    report_name: str
    frame: pl.DataFrame
    snapshot_id: str
    key_columns: List[str] = field(default_factory=list)
    metric_columns: Optional[List[str]] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    duration_seconds: float = 0.0

    @property
    def row_count(self) -> int:
        return self.frame.height

    @property
    def columns(self) -> List[str]:
        return self.frame.columns

    @property
    def is_empty(self) -> bool:
        return self.frame.is_empty()

    def to_dicts(self) -> List[Dict[str, Any]]:
        return self.frame.to_dicts()

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready representation used by the API and CLI"""
        return {
            "report": self.report_name,
            "snapshot_id": self.snapshot_id,
            "columns": self.columns,
            "row_count": self.row_count,
            "rows": self.to_dicts(),
        }


class ReportRunner:
    """
    Runs named reports against snapshots.

    Example:
        runner = ReportRunner()
        result = runner.run("top_customers_by_orders", snapshot)
        everything = runner.run_all(snapshot)
    """

    def __init__(self, max_workers: Optional[int] = None, parallel: Optional[bool] = None):
        settings = get_settings()
        self.max_workers = max_workers or settings.reports.max_workers
        self.parallel = settings.reports.parallel if parallel is None else parallel

    def _execute(self, definition: ReportDefinition, snapshot: Snapshot) -> ReportResult:
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        with report_context(definition.name, snapshot.snapshot_id):
            frame = definition.build(snapshot)
            duration = time.perf_counter() - start
            logger.info("Report computed", rows=frame.height, duration_ms=round(duration * 1000, 2))
        return ReportResult(
            report_name=definition.name,
            frame=frame,
            snapshot_id=snapshot.snapshot_id,
            key_columns=list(definition.key_columns),
            metric_columns=None if definition.metric_columns is None else list(definition.metric_columns),
            started_at=started_at,
            duration_seconds=duration,
        )

    def run(self, report_name: str, snapshot: Snapshot) -> ReportResult:
        """
        Run one report.

        Raises:
            UnknownReportError: ``report_name`` is not in the catalog
            SchemaMismatchError: The snapshot lacks required tables/columns
        """
        definition = get_report(report_name)
        return self._execute(definition, snapshot)

    def run_all(
        self,
        snapshot: Snapshot,
        report_names: Optional[Sequence[str]] = None,
    ) -> Dict[str, ReportResult]:
        """
        Run every catalog report (or the named subset).

        Results are returned in catalog order. Schema checks happen before
        any report starts, so a missing table fails the whole call up front.
        """
        if report_names is None:
            definitions = list_reports()
        else:
            definitions = [get_report(name) for name in report_names]

        missing: Dict[str, List[str]] = {}
        for definition in definitions:
            for table, columns in snapshot.missing(definition.requires).items():
                merged = missing.setdefault(table, [])
                merged.extend(c for c in columns if c not in merged)
        if missing:
            raise SchemaMismatchError(missing)

        logger.info(
            "Running reports",
            count=len(definitions),
            snapshot_id=snapshot.snapshot_id,
            parallel=self.parallel,
        )

        if self.parallel and len(definitions) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [pool.submit(self._execute, d, snapshot) for d in definitions]
                results = [f.result() for f in futures]
        else:
            results = [self._execute(d, snapshot) for d in definitions]

        return {r.report_name: r for r in results}


def _metric_columns(result: ReportResult, keys: List[str]) -> List[str]:
    if result.metric_columns is not None:
        return list(result.metric_columns)
    return [
        name
        for name, dtype in result.frame.schema.items()
        if name not in keys and dtype.is_numeric()
    ]


def diff(baseline: ReportResult, current: ReportResult) -> pl.DataFrame:
    """
    Compare two results of the same report row by row.

    Rows are matched on the report's key columns (full outer match). Each
    metric column (the report's declared metrics, else every numeric non-key
    column) yields ``<col>_baseline``, ``<col>_current`` and ``<col>_delta``.
    A row missing on one side counts as 0 there; a null value in a row that
    exists on both sides stays null, and so does its delta.

    Example:
        diff(
            runner.run("category_revenue", snapshot.for_year(1997)),
            runner.run("category_revenue", snapshot.for_year(1998)),
        )
    """
    if baseline.report_name != current.report_name:
        raise ValueError(
            f"Cannot diff different reports: {baseline.report_name} vs {current.report_name}"
        )

    keys = baseline.key_columns or current.key_columns
    if not keys:
        raise ValueError(f"Report {baseline.report_name} declares no key columns")

    metrics = _metric_columns(baseline, keys)

    left = (
        baseline.frame.select(keys + metrics)
        .rename({m: f"{m}_baseline" for m in metrics})
        .with_columns(pl.lit(True).alias("_in_baseline"))
    )
    right = (
        current.frame.select(keys + metrics)
        .rename({m: f"{m}_current" for m in metrics})
        .with_columns(pl.lit(True).alias("_in_current"))
    )
    merged = left.join(right, on=keys, how="full", coalesce=True)

    # only rows absent on one side are zero-filled on that side
    filled = []
    for m in metrics:
        for side, marker in (("baseline", "_in_baseline"), ("current", "_in_current")):
            column = f"{m}_{side}"
            filled.append(
                pl.when(pl.col(marker).is_null()).then(0).otherwise(pl.col(column)).alias(column)
            )
    merged = (
        merged.with_columns(filled)
        .with_columns(
            [(pl.col(f"{m}_current") - pl.col(f"{m}_baseline")).alias(f"{m}_delta") for m in metrics]
        )
        .drop("_in_baseline", "_in_current")
    )

    logger.debug(
        "Report diff computed",
        report=baseline.report_name,
        baseline=baseline.snapshot_id,
        current=current.snapshot_id,
        rows=merged.height,
    )
    return merged.sort(keys)
