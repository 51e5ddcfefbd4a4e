"""Relocate every pin of a configuration when its center moves.

Two modes with separate entry points:

* :meth:`GeoRecenterEngine.recenter` shifts every coordinate by the
  planar Web-Mercator delta between the old and new center, preserving
  the relative layout.
* :meth:`GeoRecenterEngine.recenter_all_pins_to` snaps every coordinate
  onto one point, discarding the layout.

Both operate on a deep copy and leave the input untouched. The map
anchor (``settings.map.center``) is always set to the requested center
exactly, never to its projected round trip.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from pygamesync.exceptions import GameSyncCorruptDataError
from pygamesync.geo.projection import delta_between, shift_point
from pygamesync.geo.walker import Coordinate, iter_coordinates
from pygamesync.models.geo import LatLng, PlanarDelta

_logger = logging.getLogger(__name__)

_LEGACY_CENTER_KEYS = ("centerLat", "centerLng")


@dataclass(slots=True)
class RecenterOutcome:
    document: dict[str, Any]
    moved: bool
    coordinates_updated: int = 0
    delta: PlanarDelta | None = None


def _map_settings(document: dict[str, Any], *, create: bool) -> dict[str, Any] | None:
    settings = document.get("settings")
    if not isinstance(settings, dict):
        if not create:
            return None
        settings = {}
        document["settings"] = settings
    map_cfg = settings.get("map")
    if not isinstance(map_cfg, dict):
        if not create:
            return None
        map_cfg = {}
        settings["map"] = map_cfg
    return map_cfg


def find_map_center(document: dict[str, Any]) -> LatLng | None:
    """Current anchor of *document*, or ``None`` when it has none yet.

    Reads ``settings.map.center`` and falls back to the legacy
    ``settings.map.centerLat``/``centerLng`` pair.

    Raises
    ------
    GameSyncCorruptDataError
        A center is present but is not a readable coordinate.
    """
    map_cfg = _map_settings(document, create=False)
    if map_cfg is None:
        return None

    center = map_cfg.get("center")
    if center is not None:
        try:
            return LatLng.model_validate(center)
        except ValidationError as exc:
            raise GameSyncCorruptDataError(
                f"settings.map.center is unreadable: {center!r}",
                path="settings.map.center",
            ) from exc

    lat_key, lng_key = _LEGACY_CENTER_KEYS
    if map_cfg.get(lat_key) is None and map_cfg.get(lng_key) is None:
        return None
    try:
        return LatLng(lat=map_cfg.get(lat_key), lng=map_cfg.get(lng_key))
    except ValidationError as exc:
        raise GameSyncCorruptDataError(
            f"settings.map.{lat_key}/{lng_key} is unreadable",
            path="settings.map",
        ) from exc


def _move_pins(document: dict[str, Any], visitor: Callable[[Coordinate], None]) -> int:
    """Apply *visitor* to every pin, skipping the map anchor itself."""
    map_cfg = _map_settings(document, create=False)
    anchor = map_cfg.get("center") if map_cfg is not None else None
    count = 0
    for coordinate in iter_coordinates(document):
        if coordinate.node is anchor:
            continue
        visitor(coordinate)
        count += 1
    return count


def set_map_center(document: dict[str, Any], center: LatLng) -> None:
    map_cfg = _map_settings(document, create=True)
    assert map_cfg is not None  # noqa: S101
    map_cfg["center"] = center.as_dict()
    lat_key, lng_key = _LEGACY_CENTER_KEYS
    if lat_key in map_cfg or lng_key in map_cfg:
        map_cfg[lat_key] = center.lat
        map_cfg[lng_key] = center.lng


class GeoRecenterEngine:
    """Stateless recenter operations over snapshot documents."""

    def recenter(
        self,
        document: dict[str, Any],
        old_center: LatLng | None,
        new_center: LatLng,
    ) -> RecenterOutcome:
        """Shift every coordinate by the delta from *old_center* to *new_center*.

        With no *old_center* there is nothing to shift relative to: only
        the anchor is set and the outcome reports ``moved=False``.
        """
        result = copy.deepcopy(document)
        if old_center is None:
            set_map_center(result, new_center)
            return RecenterOutcome(document=result, moved=False)

        delta = delta_between(old_center, new_center)

        def _shift(coordinate: Coordinate) -> None:
            lat, lng = shift_point(coordinate.lat, coordinate.lng, delta)
            coordinate.move_to(lat, lng)

        count = _move_pins(result, _shift)
        set_map_center(result, new_center)
        _logger.debug("Shifted %d coordinates by dx=%.3f dy=%.3f", count, delta.dx, delta.dy)
        return RecenterOutcome(document=result, moved=True, coordinates_updated=count, delta=delta)

    def recenter_all_pins_to(self, document: dict[str, Any], new_center: LatLng) -> RecenterOutcome:
        """Overwrite every coordinate with *new_center* (layout discarded)."""
        result = copy.deepcopy(document)
        count = _move_pins(result, lambda coordinate: coordinate.move_to(new_center.lat, new_center.lng))
        set_map_center(result, new_center)
        _logger.debug("Moved %d coordinates onto %s", count, new_center.as_dict())
        return RecenterOutcome(document=result, moved=count > 0, coordinates_updated=count)
