"""Pydantic request models for client entrypoints.

These models provide a consistent "validate → normalize → execute" flow.
They are used internally by :class:`pygamesync.pipeline.PublishPipeline`.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pygamesync.exceptions import GameSyncValidationError
from pygamesync.models._base import GameSyncBaseModel
from pygamesync.models.channel import Channel, normalize_channel
from pygamesync.models.geo import LatLng, RecenterMode
from pygamesync.models.snapshot import GameFlags

TModel = TypeVar("TModel", bound=BaseModel)


class SaveRequest(GameSyncBaseModel):
    """Body accepted by save/publish.

    Shapes are coerced rather than rejected: a non-list ``missions`` or
    ``devices`` becomes ``[]`` and a non-object ``settings``/``media``
    becomes ``{}``.
    """

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    flags: GameFlags = Field(default_factory=GameFlags)
    settings: dict[str, Any] = Field(default_factory=dict)
    missions: list[Any] = Field(default_factory=list)
    devices: list[Any] = Field(default_factory=list)
    media: dict[str, Any] = Field(default_factory=dict)
    default_channel: Channel | None = None
    version_id: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _clean_title(cls, value: Any) -> str | None:
        if value is None:
            return None
        title = str(value).strip()
        return title or None

    @field_validator("settings", "media", "flags", mode="before")
    @classmethod
    def _object_or_empty(cls, value: Any) -> Any:
        if isinstance(value, GameFlags):
            return value
        return value if isinstance(value, dict) else {}

    @field_validator("missions", "devices", mode="before")
    @classmethod
    def _list_or_empty(cls, value: Any) -> list[Any]:
        return value if isinstance(value, list) else []

    @field_validator("default_channel", mode="before")
    @classmethod
    def _normalize_default(cls, value: Any) -> Channel | None:
        if value is None or value == "":
            return None
        return normalize_channel(value)

    @field_validator("version_id", mode="before")
    @classmethod
    def _clean_version_id(cls, value: Any) -> str | None:
        if value is None:
            return None
        version_id = str(value).strip()
        return version_id or None


class RecenterRequest(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    new_center: LatLng
    mode: RecenterMode


def parse_request(model: type[TModel], data: Any) -> TModel:
    """Validate *data* into *model*, naming the offending field on failure."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", str(exc))
        raise GameSyncValidationError(
            f"Invalid {location or 'request'}: {message}",
            field=location,
        ) from exc
