"""
Report API Endpoints

REST access to the report catalog: list reports, run one, run all, and
compare a report across two order years.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel
import structlog

from northwind_analytics.data.snapshot import Snapshot
from northwind_analytics.reports import ReportRunner, diff, get_report, list_reports

router = APIRouter()
logger = structlog.get_logger(__name__)


class ReportInfo(BaseModel):
    """Catalog entry"""
    name: str
    position: int
    title: str
    description: str
    requires: Dict[str, List[str]]
    key_columns: List[str]
    metric_columns: Optional[List[str]] = None


class ReportTable(BaseModel):
    """Computed report"""
    report: str
    snapshot_id: str
    columns: List[str]
    row_count: int
    rows: List[Dict[str, Any]]


class ReportDiff(BaseModel):
    """Row-by-row comparison of one report over two years"""
    report: str
    baseline_year: int
    current_year: int
    columns: List[str]
    rows: List[Dict[str, Any]]


def _snapshot(request: Request, snapshot_id: Optional[str]) -> Snapshot:
    try:
        return request.app.state.registry.get(snapshot_id)
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0])) from None


def _runner(request: Request) -> ReportRunner:
    return request.app.state.runner


@router.get("", response_model=List[ReportInfo])
async def list_catalog() -> List[ReportInfo]:
    """All reports in catalog order."""
    return [ReportInfo(**definition.describe()) for definition in list_reports()]


@router.post("/run-all", response_model=Dict[str, ReportTable])
def run_all_reports(
    request: Request,
    snapshot_id: Optional[str] = None,
) -> Dict[str, ReportTable]:
    """Run every report against one snapshot."""
    snapshot = _snapshot(request, snapshot_id)
    results = _runner(request).run_all(snapshot)
    return {name: ReportTable(**result.to_payload()) for name, result in results.items()}


@router.get("/{report_name}", response_model=ReportTable)
def run_report(
    request: Request,
    report_name: str,
    snapshot_id: Optional[str] = None,
    year: Optional[int] = Query(default=None, description="Restrict orders to one year"),
) -> ReportTable:
    """Run a single report."""
    logger.info("run_report called", report=report_name, snapshot_id=snapshot_id, year=year)
    get_report(report_name)
    snapshot = _snapshot(request, snapshot_id)
    if year is not None:
        snapshot = snapshot.for_year(year)
    result = _runner(request).run(report_name, snapshot)
    return ReportTable(**result.to_payload())


@router.get("/{report_name}/diff", response_model=ReportDiff)
def diff_report(
    request: Request,
    report_name: str,
    baseline_year: int = Query(..., description="Order year of the baseline run"),
    current_year: int = Query(..., description="Order year of the current run"),
    snapshot_id: Optional[str] = None,
) -> ReportDiff:
    """Compare a report computed on two order years of the same snapshot."""
    get_report(report_name)
    snapshot = _snapshot(request, snapshot_id)
    runner = _runner(request)
    frame = diff(
        runner.run(report_name, snapshot.for_year(baseline_year)),
        runner.run(report_name, snapshot.for_year(current_year)),
    )
    return ReportDiff(
        report=report_name,
        baseline_year=baseline_year,
        current_year=current_year,
        columns=frame.columns,
        rows=frame.to_dicts(),
    )
