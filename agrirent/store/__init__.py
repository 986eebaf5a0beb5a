"""
Record store contract and snapshot loading.
"""

from .record_store import InMemoryRecordStore, RecordStore
from .snapshot_loader import (
    RejectedRow,
    SnapshotLoadError,
    SnapshotLoadResult,
    load_snapshot_dir,
    parse_rows,
)

__all__ = [
    "RecordStore",
    "InMemoryRecordStore",
    "RejectedRow",
    "SnapshotLoadError",
    "SnapshotLoadResult",
    "load_snapshot_dir",
    "parse_rows",
]
