"""Routing oracle results."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from pydantic import Field

from pyfleet.models._base import FleetBaseModel


class RouteResult(FleetBaseModel):
    """A single route as returned by the oracle.

    Not persisted on its own; merged into a shipment by the ETA effect.
    """

    polyline_encoded: str
    distance_meters: int = Field(ge=0)
    duration_seconds: int = Field(ge=0)

    def to_payload(self) -> dict[str, Any]:
        """Callable response shape."""
        return {
            "polyline": self.polyline_encoded,
            "distanceMeters": self.distance_meters,
            "durationSeconds": self.duration_seconds,
        }

    def to_shipment_patch(self, now: datetime) -> dict[str, Any]:
        """Derived shipment fields, with ``etaTimestamp = now + duration``."""
        return {
            "polyline": self.polyline_encoded,
            "distanceMeters": self.distance_meters,
            "durationSeconds": self.duration_seconds,
            "etaTimestamp": now + timedelta(seconds=self.duration_seconds),
        }


class OptimizedRoute(RouteResult):
    """A route through reordered stops.

    ``waypoint_order[i]`` is the oracle's ``waypoint_index`` for input
    waypoint ``i``; the first and last stops stay fixed.
    """

    waypoint_order: list[int] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["waypointOrder"] = list(self.waypoint_order)
        return payload
