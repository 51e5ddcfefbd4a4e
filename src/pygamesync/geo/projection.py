"""Spherical (Web) Mercator projection.

``x = R·λ`` and ``y = R·ln(tan(π/4 + φ/2))`` with ``R = 6378137``.
Latitudes at (or within ``POLE_EPSILON_DEG`` of) a pole are clamped
before projecting, so neither ``inf`` nor ``nan`` can come out.
"""

from __future__ import annotations

import math

from pygamesync._constants import EARTH_RADIUS_M, POLE_EPSILON_DEG
from pygamesync.models.geo import LatLng, PlanarDelta

_MAX_LATITUDE = 90.0 - POLE_EPSILON_DEG


def clamp_latitude(lat: float) -> float:
    return max(-_MAX_LATITUDE, min(_MAX_LATITUDE, lat))


def wrap_longitude(lng: float) -> float:
    """Bring *lng* back into [-180, 180] (a shift may cross the antimeridian)."""
    if -180.0 <= lng <= 180.0:
        return lng
    wrapped = ((lng + 180.0) % 360.0) - 180.0
    if wrapped == -180.0 and lng > 0:
        return 180.0
    return wrapped


def project(lat: float, lng: float) -> tuple[float, float]:
    """Degrees to planar meters."""
    phi = math.radians(clamp_latitude(lat))
    x = EARTH_RADIUS_M * math.radians(lng)
    y = EARTH_RADIUS_M * math.log(math.tan(math.pi / 4 + phi / 2))
    return x, y


def unproject(x: float, y: float) -> tuple[float, float]:
    """Planar meters to degrees (longitude wrapped into range)."""
    lng = math.degrees(x / EARTH_RADIUS_M)
    lat = math.degrees(2 * math.atan(math.exp(y / EARTH_RADIUS_M)) - math.pi / 2)
    return lat, wrap_longitude(lng)


def delta_between(old: LatLng, new: LatLng) -> PlanarDelta:
    old_x, old_y = project(old.lat, old.lng)
    new_x, new_y = project(new.lat, new.lng)
    return PlanarDelta(dx=new_x - old_x, dy=new_y - old_y)


def shift_point(lat: float, lng: float, delta: PlanarDelta) -> tuple[float, float]:
    x, y = project(lat, lng)
    return unproject(x + delta.dx, y + delta.dy)
