"""Per-title version index document."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import Field, field_validator

from pygamesync._constants import SCHEMA_VERSION
from pygamesync.models._base import GameSyncBaseModel, utc_now_iso
from pygamesync.models.channel import Channel, normalize_channel
from pygamesync.models.snapshot import GameFlags

_logger = logging.getLogger(__name__)


class ChannelPointer(GameSyncBaseModel):
    current_version_id: str
    path: str


class VersionIndex(GameSyncBaseModel):
    """``<slug>/index.json``.

    Mutable: the pipeline loads it, edits it in place and saves it back.
    ``channels`` only ever holds ``draft``/``published`` keys; anything
    else found in a stored index is dropped on load.
    """

    schema_version: int = SCHEMA_VERSION
    slug: str
    title: str
    channels: dict[Channel, ChannelPointer] = Field(default_factory=dict)
    live_channel: Channel = Channel.DRAFT
    flags: GameFlags = Field(default_factory=GameFlags)
    updated_at: str = Field(default_factory=utc_now_iso)

    @field_validator("channels", mode="before")
    @classmethod
    def _known_channels_only(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        known = {channel.value for channel in Channel}
        dropped = [key for key in value if key not in known]
        if dropped:
            _logger.debug("Dropping unknown index channels: %s", dropped)
        return {key: pointer for key, pointer in value.items() if key in known}

    @field_validator("live_channel", mode="before")
    @classmethod
    def _normalize_live(cls, value: Any) -> Channel:
        return normalize_channel(value)

    def pointer(self, channel: Channel) -> ChannelPointer | None:
        return self.channels.get(channel)
