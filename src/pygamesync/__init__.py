"""pygamesync - Async draft/publish/live storage for location-based game configurations."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pygamesync")
except PackageNotFoundError:
    __version__ = "0+local"
from pygamesync.client import GameSyncClient
from pygamesync.config import GameSyncConfig
from pygamesync.exceptions import (
    GameSyncConfigError,
    GameSyncConflictError,
    GameSyncCorruptDataError,
    GameSyncError,
    GameSyncNotFoundError,
    GameSyncStorageError,
    GameSyncValidationError,
)
from pygamesync.geo import GeoRecenterEngine
from pygamesync.models import (
    Channel,
    ChannelCurrent,
    ChannelPointer,
    GameFlags,
    LatLng,
    LiveMirror,
    MakeLiveResult,
    PlanarDelta,
    RecenterMode,
    RecenterResult,
    SavePaths,
    SaveResult,
    SelftestReport,
    Snapshot,
    VersionIndex,
)
from pygamesync.normalize import normalize_channel, normalize_slug
from pygamesync.pipeline import PublishPipeline
from pygamesync.rewrite import ContentRewriter
from pygamesync.store import MemoryObjectStore, SnapshotStore, VersionIndexStore

__all__ = [
    "__version__",
    "Channel",
    "ChannelCurrent",
    "ChannelPointer",
    "ContentRewriter",
    "GameFlags",
    "GameSyncClient",
    "GameSyncConfig",
    "GameSyncConfigError",
    "GameSyncConflictError",
    "GameSyncCorruptDataError",
    "GameSyncError",
    "GameSyncNotFoundError",
    "GameSyncStorageError",
    "GameSyncValidationError",
    "GeoRecenterEngine",
    "LatLng",
    "LiveMirror",
    "MakeLiveResult",
    "MemoryObjectStore",
    "PlanarDelta",
    "PublishPipeline",
    "RecenterMode",
    "RecenterResult",
    "SavePaths",
    "SaveResult",
    "SelftestReport",
    "Snapshot",
    "SnapshotStore",
    "VersionIndex",
    "VersionIndexStore",
    "normalize_channel",
    "normalize_slug",
]
