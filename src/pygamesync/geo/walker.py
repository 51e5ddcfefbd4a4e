"""Locate coordinate pairs anywhere in an untyped JSON tree.

A coordinate is any mapping with ``lat``/``lng`` (or the legacy
``latitude``/``longitude``) members whose values are finite, in-range
real numbers. Pairs wrapped in ``location``/``center`` objects are found
because the walk descends into every mapping and list. Invalid pairs are
skipped, never reported as errors.

The walk uses an explicit stack, so deep documents cannot hit the
interpreter recursion limit.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from pygamesync._constants import COORDINATE_DEDUP_DECIMALS
from pygamesync.models.geo import LatLng
from pygamesync.normalize import is_finite_number

_KEY_PAIRS: tuple[tuple[str, str], ...] = (
    ("lat", "lng"),
    ("latitude", "longitude"),
)


@dataclass(slots=True)
class Coordinate:
    """Handle on a coordinate-bearing mapping.

    Writes go through :meth:`move_to` and land in the original node
    under its own key names.
    """

    node: dict[str, Any]
    lat_key: str
    lng_key: str

    @property
    def lat(self) -> float:
        return float(self.node[self.lat_key])

    @property
    def lng(self) -> float:
        return float(self.node[self.lng_key])

    def move_to(self, lat: float, lng: float) -> None:
        self.node[self.lat_key] = lat
        self.node[self.lng_key] = lng

    def as_latlng(self) -> LatLng:
        return LatLng(lat=self.lat, lng=self.lng)


def _valid_pair(lat: Any, lng: Any) -> bool:
    if not (is_finite_number(lat) and is_finite_number(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def coordinate_keys(node: dict[str, Any]) -> tuple[str, str] | None:
    for lat_key, lng_key in _KEY_PAIRS:
        if lat_key in node and lng_key in node and _valid_pair(node[lat_key], node[lng_key]):
            return lat_key, lng_key
    return None


def iter_coordinates(root: Any) -> Iterator[Coordinate]:
    """Yield every valid coordinate in document order."""
    stack: list[Any] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, dict):
            keys = coordinate_keys(node)
            if keys is not None:
                yield Coordinate(node, *keys)
            children = list(node.values())
        elif isinstance(node, list):
            children = list(node)
        else:
            continue
        stack.extend(child for child in reversed(children) if isinstance(child, (dict, list)))


def for_each_coordinate(root: Any, visitor: Callable[[Coordinate], None]) -> int:
    """Call *visitor* on every coordinate; returns how many were visited."""
    count = 0
    for coordinate in iter_coordinates(root):
        visitor(coordinate)
        count += 1
    return count


def _dedup_key(lat: float, lng: float) -> tuple[float, float]:
    # + 0.0 folds -0.0 into 0.0 so both round to the same pin.
    return (
        round(lat, COORDINATE_DEDUP_DECIMALS) + 0.0,
        round(lng, COORDINATE_DEDUP_DECIMALS) + 0.0,
    )


def collect_distinct_coordinates(root: Any) -> list[LatLng]:
    """Distinct pins, first occurrence wins, compared at 6-decimal precision."""
    seen: set[tuple[float, float]] = set()
    results: list[LatLng] = []
    for coordinate in iter_coordinates(root):
        key = _dedup_key(coordinate.lat, coordinate.lng)
        if key in seen:
            continue
        seen.add(key)
        results.append(coordinate.as_latlng())
    return results
