"""
Dataset Module
"""
from .schema import FOREIGN_KEYS, PRIMARY_KEYS, TABLE_NAMES, TABLE_SCHEMAS, empty_table
from .snapshot import Snapshot
from .loader import load_snapshot, load_snapshot_from_directory

__all__ = [
    "FOREIGN_KEYS",
    "PRIMARY_KEYS",
    "TABLE_NAMES",
    "TABLE_SCHEMAS",
    "empty_table",
    "Snapshot",
    "load_snapshot",
    "load_snapshot_from_directory",
]
