"""Driver record model."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from pyfleet.models._base import FleetBaseModel, FleetTimestamp
from pyfleet.models.location import LocationSample


class DriverRecord(FleetBaseModel):
    """A driver document as stored under ``drivers/{id}``.

    Location fields are only mutated by the location validator's
    compensating write; trip fields only by the stats updater.

    Parameters
    ----------
    id : str
        Document id.
    current_location : LocationSample or None
        Last accepted position. ``None`` before the first ping.
    last_updated : datetime or None
        Client-reported time of ``current_location``. Speed checks use the
        store's own write times instead.
    total_trips : int
        Completed trip counter. Never decreases.
    current_shipment_id : str or None
        Shipment the driver is currently assigned to.
    recent_completion_keys : list of str
        Bounded ledger of shipment ids whose completion was already
        counted in ``total_trips``.
    """

    id: str = ""
    current_location: LocationSample | None = None
    last_updated: FleetTimestamp = None
    total_trips: int = Field(default=0, ge=0)
    current_shipment_id: str | None = None
    recent_completion_keys: list[str] = Field(default_factory=list)

    @classmethod
    def from_document(cls, document_id: str, data: dict[str, Any] | None) -> DriverRecord:
        payload = dict(data or {})
        payload["id"] = document_id
        return cls.model_validate(payload)
