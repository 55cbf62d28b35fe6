"""
Command Line Interface

Usage:
    northwind-reports list
    northwind-reports run top_customers_by_orders --data ./data/northwind
    northwind-reports run category_revenue --data ./data/northwind --year 1997
    northwind-reports run-all --data ./data/northwind --json
    northwind-reports diff category_revenue --data ./data/northwind --baseline-year 1997 --current-year 1998
    northwind-reports validate --data ./data/northwind
"""

import argparse
import json
import sys
from typing import List, Optional

import polars as pl
import structlog

from northwind_analytics.config import get_settings
from northwind_analytics.config.logging import configure_logging
from northwind_analytics.data.loader import load_snapshot_from_directory
from northwind_analytics.data.snapshot import Snapshot
from northwind_analytics.errors import NorthwindAnalyticsError
from northwind_analytics.quality import ValidationStatus, validate_snapshot
from northwind_analytics.reports import ReportResult, ReportRunner, diff, list_reports

logger = structlog.get_logger(__name__)


def _load(args: argparse.Namespace) -> Snapshot:
    data_path = args.data or get_settings().reports.data_path
    if not data_path:
        raise SystemExit("No snapshot directory given: pass --data or set REPORTS_DATA_PATH")
    snapshot = load_snapshot_from_directory(data_path)
    if getattr(args, "year", None) is not None:
        snapshot = snapshot.for_year(args.year)
    return snapshot


def _print_frame(title: str, frame: pl.DataFrame) -> None:
    print(f"# {title}")
    with pl.Config(tbl_rows=-1, tbl_cols=-1, fmt_str_lengths=80):
        print(frame)
    print()


def _emit(results: List[ReportResult], as_json: bool) -> None:
    if as_json:
        payload = {r.report_name: r.to_payload() for r in results}
        print(json.dumps(payload, indent=2, default=str))
        return
    for result in results:
        _print_frame(result.report_name, result.frame)


def cmd_list(args: argparse.Namespace) -> int:
    for definition in list_reports():
        print(f"{definition.position:>2}  {definition.name:<32} {definition.title}")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    runner = ReportRunner(parallel=False)
    result = runner.run(args.report, _load(args))
    _emit([result], args.json)
    return 0


def cmd_run_all(args: argparse.Namespace) -> int:
    runner = ReportRunner(max_workers=args.workers)
    results = runner.run_all(_load(args))
    _emit(list(results.values()), args.json)
    return 0


def cmd_diff(args: argparse.Namespace) -> int:
    snapshot = _load(args)
    runner = ReportRunner(parallel=False)
    frame = diff(
        runner.run(args.report, snapshot.for_year(args.baseline_year)),
        runner.run(args.report, snapshot.for_year(args.current_year)),
    )
    if args.json:
        print(json.dumps(frame.to_dicts(), indent=2, default=str))
    else:
        _print_frame(f"{args.report}: {args.baseline_year} -> {args.current_year}", frame)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    result = validate_snapshot(_load(args))
    for check in result.checks:
        mark = "ok  " if check.passed else "FAIL"
        print(f"{mark} {check.name}: {check.message}")
    print(f"{result.passed_checks}/{result.total_checks} checks passed")
    return 0 if result.status != ValidationStatus.FAILED else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="northwind-reports",
        description="Run Northwind business reports over a snapshot directory",
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    sub = parser.add_subparsers(dest="command", required=True)

    def data_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--data", help="Directory with <table>.csv / <table>.parquet files")
        p.add_argument("--json", action="store_true", help="Emit JSON instead of tables")

    p_list = sub.add_parser("list", help="List the report catalog")
    p_list.set_defaults(func=cmd_list)

    p_run = sub.add_parser("run", help="Run one report")
    p_run.add_argument("report")
    p_run.add_argument("--year", type=int, help="Restrict orders to one year")
    data_args(p_run)
    p_run.set_defaults(func=cmd_run)

    p_all = sub.add_parser("run-all", help="Run every report")
    p_all.add_argument("--year", type=int, help="Restrict orders to one year")
    p_all.add_argument("--workers", type=int, default=None, help="Worker threads")
    data_args(p_all)
    p_all.set_defaults(func=cmd_run_all)

    p_diff = sub.add_parser("diff", help="Compare one report across two order years")
    p_diff.add_argument("report")
    p_diff.add_argument("--baseline-year", type=int, required=True)
    p_diff.add_argument("--current-year", type=int, required=True)
    data_args(p_diff)
    p_diff.set_defaults(func=cmd_diff)

    p_validate = sub.add_parser("validate", help="Check snapshot keys and ranges")
    p_validate.add_argument("--data", help="Directory with <table>.csv / <table>.parquet files")
    p_validate.set_defaults(func=cmd_validate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level or "WARNING", log_format="text")
    try:
        return args.func(args)
    except NorthwindAnalyticsError as e:
        logger.error("Command failed", error=e.code, message=e.message)
        print(f"error: {e.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
