from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from pyfleet.models.shipment import ShipmentStatus
from pyfleet.state.events import ChangeNotification, DriverLocationChanged, ShipmentStatusChanged, to_event

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
_HERE = {"latitude": 40.0, "longitude": -73.0}
_THERE = {"latitude": 40.01, "longitude": -73.0}


def _driver_change(previous: dict, new: dict, **times: object) -> DriverLocationChanged:
    event = to_event(ChangeNotification(collection="drivers", document_id="d1", previous=previous, new=new, **times))
    assert isinstance(event, DriverLocationChanged)
    return event


class TestDriverEvents:
    def test_field_times_win_over_client_timestamps(self) -> None:
        event = _driver_change(
            {"currentLocation": _HERE, "lastUpdated": T0 - timedelta(days=5)},
            {"currentLocation": _THERE, "lastUpdated": T0 + timedelta(days=5)},
            previous_field_times={"currentLocation": T0},
            field_times={"currentLocation": T0 + timedelta(seconds=30)},
            previous_update_time=T0 + timedelta(seconds=20),
            update_time=T0 + timedelta(seconds=30),
        )

        assert event.previous_timestamp == T0
        assert event.new_timestamp == T0 + timedelta(seconds=30)
        assert event.previous_last_updated == T0 - timedelta(days=5)

    def test_document_write_time_when_field_times_missing(self) -> None:
        event = _driver_change(
            {"currentLocation": _HERE, "lastUpdated": T0 - timedelta(days=5)},
            {"currentLocation": _THERE},
            previous_update_time=T0,
            update_time=T0 + timedelta(seconds=30),
        )

        assert event.previous_timestamp == T0
        assert event.new_timestamp == T0 + timedelta(seconds=30)

    def test_last_updated_only_without_store_times(self) -> None:
        event = _driver_change(
            {"currentLocation": _HERE, "lastUpdated": T0},
            {"currentLocation": _THERE, "lastUpdated": "not a time"},
        )

        assert event.previous_timestamp == T0
        assert event.new_timestamp is None

    def test_malformed_new_location_is_rejected(self) -> None:
        event = _driver_change({"currentLocation": _HERE}, {"currentLocation": {"latitude": 95.0, "longitude": 0.0}})

        assert event.new_location is None
        assert event.rejected_reason is not None
        assert event.previous_location is not None

    def test_malformed_previous_location_is_dropped(self) -> None:
        event = _driver_change({"currentLocation": {"lat": 95.0, "lng": 0.0}}, {"currentLocation": _THERE})

        assert event.previous_location is None
        assert event.new_location is not None
        assert event.rejected_reason is None

    def test_write_without_location_is_no_event(self) -> None:
        notification = ChangeNotification(collection="drivers", document_id="d1", previous={}, new={"totalTrips": 1})

        assert to_event(notification) is None


class TestShipmentEvents:
    def test_invalid_fields_are_dropped_not_fatal(self) -> None:
        notification = ChangeNotification(
            collection="shipments",
            document_id="s1",
            previous={"status": "in_transit", "driverId": "d1", "destination": {"lat": 123.0, "lng": 0.0}},
            new={
                "status": "completed",
                "driverId": "d1",
                "destination": {"lat": 123.0, "lng": 0.0},
                "distanceMeters": -5,
                "polyline": "abc",
            },
        )

        event = to_event(notification)

        assert isinstance(event, ShipmentStatusChanged)
        assert event.previous_status == ShipmentStatus.IN_TRANSIT
        assert event.new_status == ShipmentStatus.COMPLETED
        assert event.shipment.driver_id == "d1"
        assert event.shipment.destination is None
        assert event.shipment.polyline == "abc"
        assert event.invalid_fields == ("destination", "distanceMeters")

    def test_valid_document_has_no_invalid_fields(self) -> None:
        notification = ChangeNotification(
            collection="shipments",
            document_id="s1",
            previous={"status": "pending"},
            new={"status": "accepted", "destination": {"lat": 1.0, "lng": 2.0}},
        )

        event = to_event(notification)

        assert isinstance(event, ShipmentStatusChanged)
        assert event.invalid_fields == ()
        assert event.shipment.destination is not None

    def test_blank_document_id_rejected(self) -> None:
        with pytest.raises(ValueError):
            ChangeNotification(collection="shipments", document_id="  ")

    def test_unknown_collection_is_no_event(self) -> None:
        assert to_event(ChangeNotification(collection="invoices", document_id="i1")) is None
