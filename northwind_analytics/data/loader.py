"""
Snapshot Loader

Builds a Snapshot from tables that are already in memory. Columns are cast
to their canonical dtypes; nothing is read from or written to storage here.

``load_snapshot_from_directory`` is a thin convenience adapter for the CLI
and the API: it reads ``<table>.parquet`` or ``<table>.csv`` files with
Polars and hands the frames to ``load_snapshot``.
"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union
import uuid

import polars as pl
import structlog

from northwind_analytics.errors import TypeMismatchError
from .schema import TABLE_SCHEMAS, empty_table
from .snapshot import Snapshot

logger = structlog.get_logger(__name__)

TableInput = Union[pl.DataFrame, Dict[str, List[Any]], List[Dict[str, Any]]]

NULL_VALUES = ["", "NULL", "null", "None", "NA", "N/A"]


def _to_frame(name: str, data: TableInput) -> pl.DataFrame:
    """Coerce supported table inputs to a DataFrame"""
    if isinstance(data, pl.DataFrame):
        return data
    if isinstance(data, list):
        if not data:
            return empty_table(name)
        return pl.DataFrame(data, infer_schema_length=None)
    if isinstance(data, dict):
        return pl.DataFrame(data)
    raise TypeError(f"Unsupported input for table '{name}': {type(data).__name__}")


def _cast_expr(column: str, current: pl.DataType, target: pl.DataType) -> pl.Expr:
    if target == pl.Date and current == pl.String:
        return pl.col(column).str.to_date(strict=True)
    if target == pl.Date and isinstance(current, pl.Datetime):
        return pl.col(column).dt.date()
    return pl.col(column).cast(target, strict=True)


def _conform(name: str, df: pl.DataFrame) -> pl.DataFrame:
    """Cast the canonical columns present in ``df``; extra columns pass through"""
    for column, target in TABLE_SCHEMAS[name].items():
        if column not in df.columns:
            continue
        current = df.schema[column]
        if current == target:
            continue
        try:
            df = df.with_columns(_cast_expr(column, current, target))
        except pl.exceptions.PolarsError as e:
            raise TypeMismatchError(
                f"Column '{name}.{column}' cannot be read as {target}: {e}",
                column=f"{name}.{column}",
                expected_type=str(target),
                actual_type=str(current),
            ) from e
    return df


def load_snapshot(
    tables: Mapping[str, TableInput],
    snapshot_id: Optional[str] = None,
    description: Optional[str] = None,
) -> Snapshot:
    """
    Build an immutable snapshot from in-memory tables.

    Args:
        tables: Mapping of table name to DataFrame, column dict or row list
        snapshot_id: Identifier for the snapshot (generated when omitted)
        description: Free-text label

    Returns:
        Snapshot with conformed tables

    Raises:
        ValueError: If a table name is not part of the schema
        TypeMismatchError: If a column cannot be cast to its canonical dtype
    """
    unknown = sorted(set(tables) - set(TABLE_SCHEMAS))
    if unknown:
        raise ValueError(f"Unknown tables: {unknown}. Expected a subset of {list(TABLE_SCHEMAS)}")

    conformed = {
        name: _conform(name, _to_frame(name, data))
        for name, data in tables.items()
    }
    snapshot = Snapshot(
        conformed,
        snapshot_id=snapshot_id or f"snapshot-{uuid.uuid4().hex[:8]}",
        description=description,
    )

    logger.info(
        "Snapshot loaded",
        snapshot_id=snapshot.snapshot_id,
        tables=snapshot.row_counts(),
    )
    return snapshot


def _read_table(path: Path) -> pl.DataFrame:
    if path.suffix == ".parquet":
        return pl.read_parquet(path)
    return pl.read_csv(path, null_values=NULL_VALUES, try_parse_dates=True)


def load_snapshot_from_directory(
    directory: Union[str, Path],
    snapshot_id: Optional[str] = None,
) -> Snapshot:
    """
    Read ``<table>.parquet`` / ``<table>.csv`` files into a snapshot.

    Parquet wins when both exist. Tables without a file are left out of the
    snapshot; reports that need them fail with SchemaMismatchError.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Snapshot directory not found: {directory}")

    frames: Dict[str, pl.DataFrame] = {}
    for name in TABLE_SCHEMAS:
        for suffix in (".parquet", ".csv"):
            path = directory / f"{name}{suffix}"
            if path.exists():
                frames[name] = _read_table(path)
                logger.debug(f"Read {frames[name].height} rows from {path}")
                break

    if not frames:
        logger.warning("No table files found", directory=str(directory))

    return load_snapshot(
        frames,
        snapshot_id=snapshot_id or directory.name,
        description=str(directory),
    )
