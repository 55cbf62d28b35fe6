"""
Serving Module
"""
from .registry import SnapshotRegistry

__all__ = ["SnapshotRegistry"]
