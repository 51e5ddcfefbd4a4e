"""Typed models for stored documents and operation results."""

from pygamesync.models.channel import Channel, normalize_channel
from pygamesync.models.geo import LatLng, PlanarDelta, RecenterMode
from pygamesync.models.index import ChannelPointer, VersionIndex
from pygamesync.models.results import MakeLiveResult, RecenterResult, SavePaths, SaveResult, SelftestReport
from pygamesync.models.snapshot import ChannelCurrent, GameFlags, LiveMirror, Snapshot

__all__ = [
    "Channel",
    "ChannelCurrent",
    "ChannelPointer",
    "GameFlags",
    "LatLng",
    "LiveMirror",
    "MakeLiveResult",
    "PlanarDelta",
    "RecenterMode",
    "RecenterResult",
    "SavePaths",
    "SaveResult",
    "SelftestReport",
    "Snapshot",
    "VersionIndex",
    "normalize_channel",
]
