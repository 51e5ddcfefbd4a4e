"""Geospatial recenter engine."""

from pygamesync.geo.engine import GeoRecenterEngine, RecenterOutcome, find_map_center, set_map_center
from pygamesync.geo.projection import delta_between, project, shift_point, unproject
from pygamesync.geo.walker import Coordinate, collect_distinct_coordinates, for_each_coordinate, iter_coordinates

__all__ = [
    "Coordinate",
    "GeoRecenterEngine",
    "RecenterOutcome",
    "collect_distinct_coordinates",
    "delta_between",
    "find_map_center",
    "for_each_coordinate",
    "iter_coordinates",
    "project",
    "set_map_center",
    "shift_point",
    "unproject",
]
