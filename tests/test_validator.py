from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from pyfleet.models.location import LocationSample
from pyfleet.validator import Accept, LocationValidator, RevertTo

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _loc(lat: float, lng: float) -> LocationSample:
    return LocationSample(latitude=lat, longitude=lng)


def _at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


def test_identical_coordinates_accepted_regardless_of_elapsed_time() -> None:
    validator = LocationValidator()
    a = _loc(40.0, -73.0)
    for elapsed in (-30.0, 0.0, 0.001, 60.0):
        assert isinstance(validator.validate(a, T0, _loc(40.0, -73.0), _at(elapsed)), Accept)


def test_spoofed_jump_is_reverted() -> None:
    validator = LocationValidator()
    previous = _loc(40.0, -73.0)

    decision = validator.validate(previous, T0, _loc(40.9, -73.0), _at(60))

    assert isinstance(decision, RevertTo)
    assert decision.previous == previous
    assert decision.previous_timestamp == T0
    assert decision.distance_meters / 1000 == pytest.approx(100.1, abs=0.1)
    assert decision.speed_kmh == pytest.approx(6006, rel=1e-3)
    assert decision.elapsed_seconds == 60


def test_plausible_move_is_accepted() -> None:
    decision = LocationValidator().validate(_loc(40.0, -73.0), T0, _loc(40.01, -73.0), _at(60))

    assert isinstance(decision, Accept)
    assert decision.distance_meters / 1000 == pytest.approx(1.11, abs=0.01)
    assert decision.speed_kmh == pytest.approx(66.7, abs=0.1)


@pytest.mark.parametrize("elapsed", [0.0, -1.0, -3600.0])
def test_non_positive_elapsed_never_evaluates_speed(elapsed: float) -> None:
    decision = LocationValidator().validate(_loc(40.0, -73.0), T0, _loc(45.0, -73.0), _at(elapsed))

    assert isinstance(decision, Accept)
    assert decision.speed_kmh is None


def test_first_update_without_previous_is_accepted() -> None:
    assert isinstance(LocationValidator().validate(None, None, _loc(40.0, -73.0), T0), Accept)


def test_missing_timestamps_default_to_now() -> None:
    validator = LocationValidator(clock=lambda: _at(3600))

    # Previous written an hour before "now"; next has no timestamp -> now.
    decision = validator.validate(_loc(40.0, -73.0), T0, _loc(40.5, -73.0), None)
    assert isinstance(decision, Accept)
    assert decision.elapsed_seconds == 3600

    # Both missing -> elapsed 0 -> not rejected.
    assert isinstance(validator.validate(_loc(40.0, -73.0), None, _loc(45.0, -73.0), None), Accept)


def test_threshold_is_configurable() -> None:
    previous, nxt = _loc(40.0, -73.0), _loc(40.01, -73.0)

    assert isinstance(LocationValidator(max_speed_kmh=50).validate(previous, T0, nxt, _at(60)), RevertTo)
    assert isinstance(LocationValidator(max_speed_kmh=70).validate(previous, T0, nxt, _at(60)), Accept)


def test_speed_exactly_at_threshold_is_accepted() -> None:
    previous, nxt = _loc(40.0, -73.0), _loc(40.01, -73.0)
    speed = LocationValidator().validate(previous, T0, nxt, _at(60)).speed_kmh
    assert speed is not None

    assert isinstance(LocationValidator(max_speed_kmh=speed).validate(previous, T0, nxt, _at(60)), Accept)


def test_rejects_non_positive_threshold() -> None:
    with pytest.raises(ValueError):
        LocationValidator(max_speed_kmh=0)
