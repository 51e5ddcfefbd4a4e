"""Storage layer: key layout, JSON document store, version index."""

from pygamesync.store.index import LoadedIndex, VersionIndexStore
from pygamesync.store.memory import MemoryObjectStore
from pygamesync.store.snapshots import ReadResult, ReadStatus, SnapshotStore

__all__ = [
    "LoadedIndex",
    "MemoryObjectStore",
    "ReadResult",
    "ReadStatus",
    "SnapshotStore",
    "VersionIndexStore",
]
