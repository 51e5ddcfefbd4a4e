"""Geographic value models."""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class RecenterMode(StrEnum):
    """How a recenter moves the pins of a configuration.

    ``RELATIVE`` shifts every pin by the planar delta between the old and
    new center (layout preserved). ``ABSOLUTE`` snaps every pin onto the
    new center (layout discarded). The two are not interchangeable and
    no default is provided anywhere in the public API.
    """

    RELATIVE = "relative"
    ABSOLUTE = "absolute"


class LatLng(BaseModel):
    """A validated coordinate pair.

    Accepts ``{"lat", "lng"}`` as well as the legacy
    ``{"latitude", "longitude"}`` (and ``lon``) spellings.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    lat: float = Field(validation_alias=AliasChoices("lat", "latitude"))
    lng: float = Field(validation_alias=AliasChoices("lng", "longitude", "lon"))

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _require_number(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("coordinate must be a number")
        return value

    @field_validator("lat")
    @classmethod
    def _check_lat(cls, value: float) -> float:
        if not math.isfinite(value) or not -90.0 <= value <= 90.0:
            raise ValueError(f"lat must be a finite number in [-90, 90], got {value}")
        return value

    @field_validator("lng")
    @classmethod
    def _check_lng(cls, value: float) -> float:
        if not math.isfinite(value) or not -180.0 <= value <= 180.0:
            raise ValueError(f"lng must be a finite number in [-180, 180], got {value}")
        return value

    def as_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


class PlanarDelta(BaseModel):
    """Web-Mercator offset in meters."""

    model_config = ConfigDict(frozen=True)

    dx: float
    dy: float
