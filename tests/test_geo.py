from __future__ import annotations

import pytest

from pyfleet.geo import great_circle_distance_meters, initial_bearing_degrees
from pyfleet.models.location import Coordinate, LocationSample


def _loc(lat: float, lng: float) -> LocationSample:
    return LocationSample(latitude=lat, longitude=lng)


def test_distance_is_symmetric() -> None:
    pairs = [
        (_loc(40.0, -73.0), _loc(40.9, -73.0)),
        (_loc(-33.86, 151.21), _loc(51.5, -0.12)),
        (_loc(0.0, 179.9), _loc(0.0, -179.9)),
    ]
    for a, b in pairs:
        assert great_circle_distance_meters(a, b) == pytest.approx(great_circle_distance_meters(b, a))


def test_distance_to_self_is_zero() -> None:
    a = _loc(12.34, 56.78)
    assert great_circle_distance_meters(a, a) == pytest.approx(0.0, abs=1e-9)


def test_one_degree_of_latitude() -> None:
    # 6371 km * pi / 180
    assert great_circle_distance_meters(_loc(40.0, -73.0), _loc(41.0, -73.0)) == pytest.approx(111_195, rel=1e-4)


def test_short_hop_matches_expected_scale() -> None:
    assert great_circle_distance_meters(_loc(40.0, -73.0), _loc(40.01, -73.0)) == pytest.approx(1112, abs=1)


def test_antimeridian_is_short_way_round() -> None:
    assert great_circle_distance_meters(_loc(0.0, 179.9), _loc(0.0, -179.9)) < 25_000


def test_accepts_coordinates_as_well_as_samples() -> None:
    a = Coordinate(lat=40.0, lng=-73.0)
    b = _loc(40.01, -73.0)
    assert great_circle_distance_meters(a, b) == pytest.approx(great_circle_distance_meters(_loc(40.0, -73.0), b))


def test_initial_bearing_cardinal_directions() -> None:
    origin = _loc(0.0, 0.0)
    assert initial_bearing_degrees(origin, _loc(1.0, 0.0)) == pytest.approx(0.0, abs=1e-6)
    assert initial_bearing_degrees(origin, _loc(0.0, 1.0)) == pytest.approx(90.0, abs=1e-6)
    assert initial_bearing_degrees(origin, _loc(-1.0, 0.0)) == pytest.approx(180.0, abs=1e-6)
    assert initial_bearing_degrees(origin, _loc(0.0, -1.0)) == pytest.approx(270.0, abs=1e-6)
