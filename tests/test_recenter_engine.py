from __future__ import annotations

import copy

import pytest

from pygamesync.exceptions import GameSyncCorruptDataError
from pygamesync.geo.engine import GeoRecenterEngine, find_map_center, set_map_center
from pygamesync.geo.projection import delta_between, project
from pygamesync.geo.walker import iter_coordinates
from pygamesync.models.geo import LatLng

OLD = LatLng(lat=44.0, lng=-94.0)
NEW = LatLng(lat=45.0, lng=-93.0)


def _document() -> dict[str, object]:
    return {
        "settings": {"map": {"center": {"lat": 44.0, "lng": -94.0}}},
        "devices": [
            {"id": "at-center", "lat": 44.0, "lng": -94.0},
            {"id": "south-west", "location": {"lat": 43.0, "lng": -95.0}},
        ],
        "missions": [{"target": {"latitude": 44.5, "longitude": -93.5}}],
    }


def test_device_at_old_center_lands_on_new_center() -> None:
    outcome = GeoRecenterEngine().recenter(_document(), OLD, NEW)

    device = outcome.document["devices"][0]
    assert outcome.moved is True
    assert device["lat"] == pytest.approx(45.0, abs=1e-9)
    assert device["lng"] == pytest.approx(-93.0, abs=1e-9)
    assert outcome.document["settings"]["map"]["center"] == {"lat": 45.0, "lng": -93.0}


def test_other_devices_are_shifted_not_snapped() -> None:
    outcome = GeoRecenterEngine().recenter(_document(), OLD, NEW)

    moved = outcome.document["devices"][1]["location"]
    assert (moved["lat"], moved["lng"]) != pytest.approx((45.0, -93.0))

    delta = delta_between(OLD, NEW)
    x0, y0 = project(43.0, -95.0)
    x1, y1 = project(moved["lat"], moved["lng"])
    assert x1 - x0 == pytest.approx(delta.dx, abs=1e-3)
    assert y1 - y0 == pytest.approx(delta.dy, abs=1e-3)
    assert outcome.delta == delta


def test_recenter_round_trip_restores_every_coordinate() -> None:
    original = _document()
    engine = GeoRecenterEngine()

    there = engine.recenter(original, OLD, NEW).document
    back = engine.recenter(there, NEW, OLD).document

    before = [(c.lat, c.lng) for c in iter_coordinates(original)]
    after = [(c.lat, c.lng) for c in iter_coordinates(back)]
    assert len(before) == len(after)
    for (lat0, lng0), (lat1, lng1) in zip(before, after, strict=True):
        assert lat1 == pytest.approx(lat0, abs=1e-6)
        assert lng1 == pytest.approx(lng0, abs=1e-6)


def test_recenter_does_not_mutate_input() -> None:
    document = _document()
    snapshot = copy.deepcopy(document)

    GeoRecenterEngine().recenter(document, OLD, NEW)
    GeoRecenterEngine().recenter_all_pins_to(document, NEW)

    assert document == snapshot


def test_recenter_without_old_center_only_sets_center() -> None:
    document = {"devices": [{"lat": 10.0, "lng": 10.0}]}

    outcome = GeoRecenterEngine().recenter(document, None, NEW)

    assert outcome.moved is False
    assert outcome.coordinates_updated == 0
    assert outcome.document["devices"] == [{"lat": 10.0, "lng": 10.0}]
    assert outcome.document["settings"]["map"]["center"] == {"lat": 45.0, "lng": -93.0}


def test_recenter_all_pins_to_is_idempotent() -> None:
    engine = GeoRecenterEngine()

    once = engine.recenter_all_pins_to(_document(), NEW)
    twice = engine.recenter_all_pins_to(once.document, NEW)

    assert once.document == twice.document
    assert once.moved is True
    assert once.coordinates_updated == 3
    assert all((c.lat, c.lng) == (45.0, -93.0) for c in iter_coordinates(once.document))


def test_recenter_all_pins_to_empty_document_reports_not_moved() -> None:
    outcome = GeoRecenterEngine().recenter_all_pins_to({}, NEW)

    assert outcome.moved is False
    assert outcome.document == {"settings": {"map": {"center": {"lat": 45.0, "lng": -93.0}}}}


def test_find_map_center_reads_legacy_keys() -> None:
    document = {"settings": {"map": {"centerLat": 44.0, "centerLng": -94.0}}}

    assert find_map_center(document) == OLD


def test_find_map_center_missing() -> None:
    assert find_map_center({}) is None
    assert find_map_center({"settings": {"map": {}}}) is None
    assert find_map_center({"settings": "nope"}) is None


@pytest.mark.parametrize(
    "map_cfg",
    [
        {"center": {"lat": "north", "lng": 1.0}},
        {"center": {"lat": 200.0, "lng": 1.0}},
        {"center": "44,-94"},
        {"centerLat": 44.0},
    ],
)
def test_find_map_center_unreadable_raises(map_cfg: dict[str, object]) -> None:
    with pytest.raises(GameSyncCorruptDataError):
        find_map_center({"settings": {"map": map_cfg}})


def test_set_map_center_updates_legacy_keys_when_present() -> None:
    document = {"settings": {"map": {"centerLat": 1.0, "centerLng": 2.0, "zoom": 12}}}

    set_map_center(document, NEW)

    assert document["settings"]["map"] == {
        "centerLat": 45.0,
        "centerLng": -93.0,
        "zoom": 12,
        "center": {"lat": 45.0, "lng": -93.0},
    }


def test_map_anchor_is_not_counted_as_a_pin() -> None:
    engine = GeoRecenterEngine()
    center_only = {"settings": {"map": {"center": {"lat": 44.0, "lng": -94.0}}}}

    snapped = engine.recenter_all_pins_to(center_only, NEW)
    shifted = engine.recenter(_document(), OLD, NEW)

    assert snapped.moved is False
    assert snapped.coordinates_updated == 0
    assert snapped.document["settings"]["map"]["center"] == {"lat": 45.0, "lng": -93.0}
    assert shifted.coordinates_updated == 3
