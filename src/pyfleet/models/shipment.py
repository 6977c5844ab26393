"""Shipment record model and status enum."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator

from pyfleet.models._base import FleetBaseModel, FleetTimestamp
from pyfleet.models.location import Coordinate


class ShipmentStatus(StrEnum):
    """Shipment lifecycle states.

    Statuses written by newer clients that have no mapped member resolve
    to ``UNKNOWN`` instead of raising.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> ShipmentStatus:
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (ShipmentStatus.COMPLETED, ShipmentStatus.CANCELLED)


class ShipmentRecord(FleetBaseModel):
    """A shipment document as stored under ``shipments/{id}``.

    ``status`` is set externally; ``polyline``, ``distance_meters``,
    ``duration_seconds`` and ``eta_timestamp`` are only written by the
    state machine's ETA effect.
    """

    id: str = ""
    status: ShipmentStatus = ShipmentStatus.PENDING
    driver_id: str | None = None
    destination: Coordinate | None = None
    polyline: str | None = None
    distance_meters: int | None = Field(default=None, ge=0)
    duration_seconds: int | None = Field(default=None, ge=0)
    eta_timestamp: FleetTimestamp = None

    @field_validator("driver_id", mode="before")
    @classmethod
    def _blank_driver_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_document(cls, document_id: str, data: dict[str, Any] | None) -> ShipmentRecord:
        payload = dict(data or {})
        payload["id"] = document_id
        return cls.model_validate(payload)
