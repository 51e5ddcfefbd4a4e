"""Result models returned by pipeline operations."""

from __future__ import annotations

from pydantic import ConfigDict, Field

from pygamesync.models._base import GameSyncBaseModel
from pygamesync.models.channel import Channel
from pygamesync.models.geo import PlanarDelta, RecenterMode


class _Result(GameSyncBaseModel):
    model_config = ConfigDict(frozen=True)


class SavePaths(_Result):
    index: str
    version: str
    current: str
    live: str | None = None


class SaveResult(_Result):
    op: str
    slug: str
    channel: Channel
    version_id: str
    paths: SavePaths


class MakeLiveResult(_Result):
    slug: str
    live_channel: Channel


class RecenterResult(_Result):
    """Outcome of a recenter.

    ``moved`` is ``False`` when the configuration had no prior center and
    only the new center was recorded (relative mode), or when absolute
    mode found no pins to move.
    """

    slug: str
    channel: Channel
    mode: RecenterMode
    moved: bool
    version_id: str
    coordinates_updated: int = 0
    delta: PlanarDelta | None = None
    message: str = ""
    paths: SavePaths


class SelftestReport(_Result):
    ok: bool
    env: dict[str, bool] = Field(default_factory=dict)
    bucket: str = ""
    write: bool = False
    error: str | None = None
