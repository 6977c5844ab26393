"""Store change notifications and the typed events derived from them.

Only two document kinds carry behaviour: ``drivers/{id}`` (location
pings) and ``shipments/{id}`` (status changes). Everything else is
ignored by :func:`to_event`.

Location timestamps come from the store, never from the document: the
time the ``currentLocation`` field last changed, else the document's
write time. Only a notification that carries neither (one assembled
outside a store, or from a store that does not report write times) falls
back to the client-written ``lastUpdated`` field, which a client can
set to anything.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from pyfleet._constants import DRIVERS, LAST_UPDATED_FIELD, LOCATION_FIELD, SHIPMENTS
from pyfleet.exceptions import FleetInvalidArgumentError
from pyfleet.models._base import FleetTimestamp
from pyfleet.models.location import LocationSample
from pyfleet.models.shipment import ShipmentRecord, ShipmentStatus

_logger = logging.getLogger(__name__)

_TIMESTAMP: TypeAdapter[datetime | None] = TypeAdapter(FleetTimestamp)


class ChangeNotification(BaseModel):
    """One document update as delivered by the store.

    ``version`` is the store's per-document version after the write; it
    is the fencing token for any compensating write. The ``*_time``
    fields are the store's own clock.
    """

    model_config = ConfigDict(frozen=True)

    collection: str
    document_id: str
    previous: dict[str, Any] = Field(default_factory=dict)
    new: dict[str, Any] = Field(default_factory=dict)
    previous_version: int | None = None
    version: int | None = None
    previous_update_time: datetime | None = None
    update_time: datetime | None = None
    previous_field_times: dict[str, datetime] = Field(default_factory=dict)
    field_times: dict[str, datetime] = Field(default_factory=dict)
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("document_id")
    @classmethod
    def _non_empty_id(cls, value: str) -> str:
        document_id = value.strip()
        if not document_id:
            raise ValueError("document_id must be non-empty")
        return document_id

    @property
    def path(self) -> str:
        return f"{self.collection}/{self.document_id}"


class DriverLocationChanged(BaseModel):
    """A write to a driver document that carries a location.

    ``previous_timestamp`` and ``new_timestamp`` are store write times.
    ``previous_last_updated`` is the raw ``lastUpdated`` value before the
    write, which a compensating write puts back.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["driver_location_changed"] = "driver_location_changed"
    driver_id: str
    previous_location: LocationSample | None = None
    previous_timestamp: datetime | None = None
    previous_last_updated: Any = None
    new_location: LocationSample | None = None
    new_timestamp: datetime | None = None
    rejected_reason: str | None = None
    """Why the written location is not a valid position; ``new_location`` is then ``None``."""
    version: int | None = None


class ShipmentStatusChanged(BaseModel):
    """A write to a shipment document.

    ``invalid_fields`` names fields of the new document that failed
    validation and were left out of ``shipment``.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["shipment_status_changed"] = "shipment_status_changed"
    shipment: ShipmentRecord
    previous_status: ShipmentStatus
    new_status: ShipmentStatus
    invalid_fields: tuple[str, ...] = ()
    version: int | None = None

    @property
    def is_transition(self) -> bool:
        return self.previous_status != self.new_status


FleetEvent = Annotated[DriverLocationChanged | ShipmentStatusChanged, Field(discriminator="kind")]


def _timestamp(value: Any) -> datetime | None:
    try:
        return _TIMESTAMP.validate_python(value)
    except ValidationError:
        return None


def _location_time(
    field_times: Mapping[str, datetime],
    update_time: datetime | None,
    document: Mapping[str, Any],
) -> datetime | None:
    if LOCATION_FIELD in field_times:
        return field_times[LOCATION_FIELD]
    if update_time is not None:
        return update_time
    return _timestamp(document.get(LAST_UPDATED_FIELD))


def _driver_event(notification: ChangeNotification) -> DriverLocationChanged | None:
    raw_location = notification.new.get(LOCATION_FIELD)
    if raw_location is None:
        return None

    previous_location: LocationSample | None = None
    raw_previous = notification.previous.get(LOCATION_FIELD)
    if raw_previous is not None:
        try:
            previous_location = LocationSample.model_validate(raw_previous)
        except ValidationError as exc:
            _logger.warning(
                "Previous location of %s is malformed (%d error(s)); treating it as missing",
                notification.path,
                exc.error_count(),
            )

    new_location: LocationSample | None = None
    rejected_reason: str | None = None
    try:
        new_location = LocationSample.model_validate(raw_location)
    except ValidationError as exc:
        rejected_reason = f"malformed location ({exc.error_count()} error(s))"

    return DriverLocationChanged(
        driver_id=notification.document_id,
        previous_location=previous_location,
        previous_timestamp=_location_time(
            notification.previous_field_times,
            notification.previous_update_time,
            notification.previous,
        ),
        previous_last_updated=notification.previous.get(LAST_UPDATED_FIELD),
        new_location=new_location,
        new_timestamp=_location_time(notification.field_times, notification.update_time, notification.new),
        rejected_reason=rejected_reason,
        version=notification.version,
    )


def _shipment_record(document_id: str, data: dict[str, Any]) -> tuple[ShipmentRecord, tuple[str, ...]]:
    """Parse *data*, dropping top-level fields that fail validation."""
    try:
        return ShipmentRecord.from_document(document_id, data), ()
    except ValidationError as exc:
        invalid = tuple(sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]}))
    usable = {key: value for key, value in data.items() if key not in invalid}
    return ShipmentRecord.from_document(document_id, usable), invalid


def _shipment_event(notification: ChangeNotification) -> ShipmentStatusChanged:
    before, _ = _shipment_record(notification.document_id, notification.previous)
    after, invalid_fields = _shipment_record(notification.document_id, notification.new)
    if invalid_fields:
        _logger.warning("Shipment %s has invalid fields: %s", notification.path, ", ".join(invalid_fields))
    return ShipmentStatusChanged(
        shipment=after,
        previous_status=before.status,
        new_status=after.status,
        invalid_fields=invalid_fields,
        version=notification.version,
    )


def to_event(notification: ChangeNotification) -> FleetEvent | None:
    """Convert a raw notification into a typed event.

    Returns ``None`` for collections without behaviour and for driver
    updates that carry no location. A malformed driver location becomes a
    rejected event rather than an error.

    Raises
    ------
    FleetInvalidArgumentError
        If a shipment document cannot be parsed even after dropping its
        invalid fields.
    """
    try:
        if notification.collection == DRIVERS:
            return _driver_event(notification)
        if notification.collection == SHIPMENTS:
            return _shipment_event(notification)
    except ValidationError as exc:
        count = exc.error_count()
        raise FleetInvalidArgumentError(f"Malformed document {notification.path}: {count} error(s)") from exc
    return None
