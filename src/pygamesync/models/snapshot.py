"""Stored configuration documents: snapshots, channel pointers, live mirror."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from pygamesync._constants import SCHEMA_VERSION
from pygamesync.models._base import GameSyncBaseModel, utc_now_iso
from pygamesync.models.channel import Channel, normalize_channel


class GameFlags(GameSyncBaseModel):
    """Per-title feature flags.

    Stored as ``{"GAME_ENABLED": bool}``; ``enabled``, ``game_enabled`` and
    ``gameEnabled`` are accepted on input.
    """

    game_enabled: bool = Field(
        default=False,
        validation_alias=AliasChoices("GAME_ENABLED", "game_enabled", "gameEnabled", "enabled"),
        serialization_alias="GAME_ENABLED",
    )

    @field_validator("game_enabled", mode="before")
    @classmethod
    def _truthy(cls, value: Any) -> bool:
        return bool(value)


class Snapshot(GameSyncBaseModel):
    """An immutable, versioned game configuration.

    A change never edits a stored snapshot; it produces a new one under a
    new version id.

    Parameters
    ----------
    slug : str
        Normalized title slug.
    title : str
        Display title (defaults to the slug).
    channel : Channel
        Channel the snapshot was saved to.
    flags : GameFlags
        Feature flags at save time.
    default_channel : Channel
        Channel new readers should default to.
    settings : dict
        Free-form settings; ``settings.map.center`` anchors the layout.
    missions, devices : list
        Opaque payload arrays.
    media : dict
        Opaque media manifest.
    updated_at : str
        ISO-8601 UTC save time.
    """

    model_config = ConfigDict(frozen=True)

    schema_version: int = SCHEMA_VERSION
    slug: str
    title: str
    channel: Channel = Channel.DRAFT
    flags: GameFlags = Field(default_factory=GameFlags)
    default_channel: Channel = Channel.DRAFT
    settings: dict[str, Any] = Field(default_factory=dict)
    missions: list[Any] = Field(default_factory=list)
    devices: list[Any] = Field(default_factory=list)
    media: dict[str, Any] = Field(default_factory=dict)
    updated_at: str = Field(default_factory=utc_now_iso)

    @field_validator("channel", "default_channel", mode="before")
    @classmethod
    def _normalize_channel(cls, value: Any) -> Channel:
        return normalize_channel(value)


class ChannelCurrent(GameSyncBaseModel):
    """``<slug>/<channel>/current.json``: pointer plus a denormalized snapshot."""

    version_id: str
    path: str
    snapshot: Snapshot


class LiveMirror(ChannelCurrent):
    """``<slug>/live/current.json``: copy of the published current document."""

    mirrored_from: Channel = Channel.PUBLISHED
