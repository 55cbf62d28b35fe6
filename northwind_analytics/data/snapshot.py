"""
Dataset Snapshot

An immutable, in-memory instance of the Northwind dataset. Reports read from
a snapshot and never write to it.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

import polars as pl
import structlog

from northwind_analytics.errors import SchemaMismatchError
from .schema import TABLE_NAMES, empty_table

logger = structlog.get_logger(__name__)

Requirements = Mapping[str, Iterable[str]]


@dataclass(frozen=True, eq=False)
class Snapshot:
    """
    Read-only collection of named polars DataFrames.
    
    Tables may be a subset of the full schema; missing tables or columns are
    only reported when a report that needs them runs.
    
    Example:
        snapshot = load_snapshot({"customers": customers_df, "orders": orders_df})
        snapshot.table("orders").height
    """
    tables: Mapping[str, pl.DataFrame]
    snapshot_id: str = "default"
    description: Optional[str] = None
    
    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", MappingProxyType(dict(self.tables)))
    
    @classmethod
    def empty(cls, snapshot_id: str = "empty") -> "Snapshot":
        """Snapshot with every table present and zero rows"""
        return cls({name: empty_table(name) for name in TABLE_NAMES}, snapshot_id=snapshot_id)
    
    @property
    def table_names(self) -> List[str]:
        return list(self.tables)
    
    def has_table(self, name: str) -> bool:
        return name in self.tables
    
    def table(self, name: str) -> pl.DataFrame:
        """Return table ``name`` or raise SchemaMismatchError if absent"""
        try:
            return self.tables[name]
        except KeyError:
            raise SchemaMismatchError({name: []}) from None
    
    def missing(self, requirements: Requirements) -> Dict[str, List[str]]:
        """
        Compare the snapshot against required tables/columns.
        
        Returns:
            Mapping of table name to missing columns (an empty list when the
            whole table is absent). Empty when every requirement is met.
        """
        missing: Dict[str, List[str]] = {}
        for table, columns in requirements.items():
            if table not in self.tables:
                missing[table] = []
                continue
            present = set(self.tables[table].columns)
            absent = [c for c in columns if c not in present]
            if absent:
                missing[table] = absent
        return missing
    
    def require(self, requirements: Requirements, report: Optional[str] = None) -> None:
        """Raise SchemaMismatchError unless every requirement is met"""
        missing = self.missing(requirements)
        if missing:
            raise SchemaMismatchError(missing, report=report)
    
    def row_counts(self) -> Dict[str, int]:
        return {name: df.height for name, df in self.tables.items()}
    
    def for_year(self, year: int, snapshot_id: Optional[str] = None) -> "Snapshot":
        """
        Derive a snapshot restricted to orders placed in ``year``.
        
        Order details are restricted to the surviving orders; dimension tables
        are shared unchanged. Used to compare two periods with the same report.
        """
        self.require({"orders": ["order_id", "order_date"]})
        orders = self.tables["orders"].filter(pl.col("order_date").dt.year() == year)
        tables = dict(self.tables)
        tables["orders"] = orders
        if "order_details" in tables:
            tables["order_details"] = tables["order_details"].join(
                orders.select("order_id"), on="order_id", how="semi"
            )
        
        logger.debug(
            "Derived period snapshot",
            source=self.snapshot_id,
            year=year,
            orders=orders.height,
        )
        return Snapshot(tables, snapshot_id=snapshot_id or f"{self.snapshot_id}@{year}")
