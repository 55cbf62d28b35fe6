"""
Relational Operators

Pure functions over polars DataFrames mirroring the SQL building blocks the
reports are written in: INNER JOIN, GROUP BY with aggregates, HAVING,
RANK() / LAG() over a partition, and ROUND().

None of the operators mutates its inputs; each returns a new DataFrame.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import polars as pl
import structlog

from northwind_analytics.errors import SchemaMismatchError, TypeMismatchError

logger = structlog.get_logger(__name__)

Columns = Union[str, Sequence[str]]


def _as_list(columns: Optional[Columns]) -> List[str]:
    if columns is None:
        return []
    if isinstance(columns, str):
        return [columns]
    return list(columns)


def _require_columns(df: pl.DataFrame, columns: Sequence[str], side: str) -> None:
    absent = [c for c in columns if c not in df.columns]
    if absent:
        raise SchemaMismatchError({side: absent})


class AggregateFunction(str, Enum):
    """Supported aggregate functions"""
    COUNT = "count"
    COUNT_DISTINCT = "count_distinct"
    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"
    CONCAT_DISTINCT = "concat_distinct"


@dataclass(frozen=True)
class Aggregation:
    """
    One aggregate output column.

    Example:
        group_aggregate(df, ["customer_id"], {
            "order_count": Aggregation.count_distinct("order_id"),
            "countries": Aggregation.concat_distinct("ship_country"),
        })
    """
    func: AggregateFunction
    column: Optional[str] = None
    separator: str = ", "

    @classmethod
    def count(cls, column: Optional[str] = None) -> "Aggregation":
        """COUNT(column), or COUNT(*) when no column is given"""
        return cls(AggregateFunction.COUNT, column)

    @classmethod
    def count_distinct(cls, column: str) -> "Aggregation":
        return cls(AggregateFunction.COUNT_DISTINCT, column)

    @classmethod
    def sum(cls, column: str) -> "Aggregation":
        return cls(AggregateFunction.SUM, column)

    @classmethod
    def avg(cls, column: str) -> "Aggregation":
        return cls(AggregateFunction.AVG, column)

    @classmethod
    def min(cls, column: str) -> "Aggregation":
        return cls(AggregateFunction.MIN, column)

    @classmethod
    def max(cls, column: str) -> "Aggregation":
        return cls(AggregateFunction.MAX, column)

    @classmethod
    def concat_distinct(cls, column: str, separator: str = ", ") -> "Aggregation":
        """Sorted distinct values joined into one string"""
        return cls(AggregateFunction.CONCAT_DISTINCT, column, separator)

    def to_expr(self, alias: str) -> pl.Expr:
        if self.func == AggregateFunction.COUNT and self.column is None:
            return pl.len().cast(pl.Int64).alias(alias)

        col = pl.col(self.column)
        if self.func == AggregateFunction.COUNT:
            expr = col.count().cast(pl.Int64)
        elif self.func == AggregateFunction.COUNT_DISTINCT:
            # SQL COUNT(DISTINCT x) ignores nulls
            expr = col.drop_nulls().n_unique().cast(pl.Int64)
        elif self.func == AggregateFunction.SUM:
            expr = col.sum()
        elif self.func == AggregateFunction.AVG:
            # mean of an empty or all-null group is null
            expr = col.mean()
        elif self.func == AggregateFunction.MIN:
            expr = col.min()
        elif self.func == AggregateFunction.MAX:
            expr = col.max()
        elif self.func == AggregateFunction.CONCAT_DISTINCT:
            expr = col.drop_nulls().cast(pl.String).unique().sort()
        else:
            raise ValueError(f"Unsupported aggregate: {self.func}")
        return expr.alias(alias)


def join(
    left: pl.DataFrame,
    right: pl.DataFrame,
    on: Optional[Columns] = None,
    left_on: Optional[Columns] = None,
    right_on: Optional[Columns] = None,
    suffix: str = "_right",
) -> pl.DataFrame:
    """
    Inner equi-join. Rows without a match on either side are dropped.

    Args:
        left: Left table
        right: Right table
        on: Key column(s) shared by both sides
        left_on: Left key column(s) when names differ
        right_on: Right key column(s) when names differ
        suffix: Suffix for clashing non-key right columns

    Raises:
        SchemaMismatchError: A key column is absent
        TypeMismatchError: Paired key columns have different dtypes
    """
    if on is not None:
        left_keys = right_keys = _as_list(on)
    else:
        left_keys, right_keys = _as_list(left_on), _as_list(right_on)

    if not left_keys or len(left_keys) != len(right_keys):
        raise ValueError("join needs the same non-zero number of left and right keys")

    _require_columns(left, left_keys, "left")
    _require_columns(right, right_keys, "right")

    for lk, rk in zip(left_keys, right_keys):
        left_type, right_type = left.schema[lk], right.schema[rk]
        if left_type != right_type:
            raise TypeMismatchError(
                f"Join key type mismatch: left.{lk} is {left_type}, right.{rk} is {right_type}",
                column=lk,
                expected_type=str(left_type),
                actual_type=str(right_type),
            )

    if on is not None:
        return left.join(right, on=left_keys, how="inner", suffix=suffix)
    return left.join(right, left_on=left_keys, right_on=right_keys, how="inner", suffix=suffix)


def group_aggregate(
    table: pl.DataFrame,
    keys: Columns,
    aggregations: Mapping[str, Aggregation],
) -> pl.DataFrame:
    """
    Group rows by ``keys`` and compute one output column per aggregation.

    Output row order carries no meaning; callers sort afterwards.
    """
    key_columns = _as_list(keys)
    used = key_columns + [a.column for a in aggregations.values() if a.column is not None]
    _require_columns(table, used, "input")

    exprs = [agg.to_expr(alias) for alias, agg in aggregations.items()]
    grouped = table.group_by(key_columns, maintain_order=True).agg(exprs)

    concat_columns = [
        pl.col(alias).list.join(agg.separator)
        for alias, agg in aggregations.items()
        if agg.func == AggregateFunction.CONCAT_DISTINCT
    ]
    if concat_columns:
        grouped = grouped.with_columns(concat_columns)
    return grouped


def having(table: pl.DataFrame, predicate: pl.Expr) -> pl.DataFrame:
    """Post-aggregation filter"""
    return table.filter(predicate)


def rank_within_partition(
    table: pl.DataFrame,
    partition_by: Optional[Columns],
    order_by: str,
    descending: bool = True,
    alias: str = "rank",
) -> pl.DataFrame:
    """
    Add a RANK() column computed independently per partition.

    Ties share a rank and leave a gap: values 100, 100, 50 rank 1, 1, 3.
    """
    partition = _as_list(partition_by)
    _require_columns(table, partition + [order_by], "input")

    expr = pl.col(order_by).rank(method="min", descending=descending)
    if partition:
        expr = expr.over(partition)
    return table.with_columns(expr.cast(pl.Int64).alias(alias))


def lag_within_partition(
    table: pl.DataFrame,
    partition_by: Optional[Columns],
    order_by: Columns,
    column: str,
    offset: int = 1,
    default: Any = None,
    alias: Optional[str] = None,
) -> pl.DataFrame:
    """
    Add LAG(column, offset, default) over each ordered partition.

    The first ``offset`` rows of every partition get ``default``. The result
    is returned sorted by partition then order keys.
    """
    partition = _as_list(partition_by)
    order = _as_list(order_by)
    _require_columns(table, partition + order + [column], "input")

    ordered = table.sort(partition + order, maintain_order=True)
    expr = pl.col(column).shift(offset, fill_value=default)
    if partition:
        expr = expr.over(partition)
    return ordered.with_columns(expr.alias(alias or f"{column}_lag_{offset}"))


def round_half_away(expr: pl.Expr, decimals: int = 0) -> pl.Expr:
    """
    ROUND(x, decimals) with halves rounded away from zero.

    2.5 -> 3, -2.5 -> -3, 0.125 -> 0.13 at two decimals. Null stays null.
    """
    factor = 10 ** decimals
    value = expr.cast(pl.Float64)
    # trim binary noise such as 0.285 * 100 == 28.499999999999996
    scaled = (value.abs() * factor).round(9)
    return (scaled + 0.5).floor() * value.sign() / factor


def safe_divide(numerator: pl.Expr, denominator: pl.Expr) -> pl.Expr:
    """numerator / denominator, null when the denominator is zero or null"""
    return pl.when(denominator == 0).then(None).otherwise(numerator / denominator)


def top_n(
    table: pl.DataFrame,
    n: int,
    by: Columns,
    descending: Union[bool, Sequence[bool]] = True,
) -> pl.DataFrame:
    """Sort (nulls last) and keep the first ``n`` rows"""
    return table.sort(_as_list(by), descending=descending, nulls_last=True, maintain_order=True).head(n)
