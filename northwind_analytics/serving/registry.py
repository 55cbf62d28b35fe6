"""
Snapshot Registry

Holds the snapshots the API can run reports against, keyed by snapshot id.
Snapshots are immutable, so handing the same instance to concurrent
requests is safe; only the registry's own map is guarded.
"""

import threading
from typing import Dict, List, Optional

import structlog

from northwind_analytics.data.snapshot import Snapshot

logger = structlog.get_logger(__name__)


class SnapshotRegistry:
    """In-process map of snapshot id to Snapshot"""
    
    def __init__(self, default_id: str = "default"):
        self.default_id = default_id
        self._snapshots: Dict[str, Snapshot] = {}
        self._lock = threading.Lock()
    
    def register(self, snapshot: Snapshot, make_default: bool = False) -> None:
        with self._lock:
            self._snapshots[snapshot.snapshot_id] = snapshot
            if make_default:
                self.default_id = snapshot.snapshot_id
        logger.info(
            "Snapshot registered",
            snapshot_id=snapshot.snapshot_id,
            default=make_default,
        )
    
    def get(self, snapshot_id: Optional[str] = None) -> Snapshot:
        """Return the snapshot, or the default one when no id is given"""
        key = snapshot_id or self.default_id
        with self._lock:
            try:
                return self._snapshots[key]
            except KeyError:
                raise KeyError(f"Unknown snapshot: {key}") from None
    
    def ids(self) -> List[str]:
        with self._lock:
            return list(self._snapshots)
    
    def __len__(self) -> int:
        with self._lock:
            return len(self._snapshots)
