"""Data models for stored records, oracle results and effect outcomes."""

from pyfleet.models._base import FleetBaseModel, FleetTimestamp, parse_timestamp
from pyfleet.models.driver import DriverRecord
from pyfleet.models.location import Coordinate, LocationSample
from pyfleet.models.outcomes import Effect, EffectOutcome, EffectStatus, StatsOutcome
from pyfleet.models.route import OptimizedRoute, RouteResult
from pyfleet.models.shipment import ShipmentRecord, ShipmentStatus

__all__ = [
    "Coordinate",
    "DriverRecord",
    "Effect",
    "EffectOutcome",
    "EffectStatus",
    "FleetBaseModel",
    "FleetTimestamp",
    "LocationSample",
    "OptimizedRoute",
    "RouteResult",
    "ShipmentRecord",
    "ShipmentStatus",
    "StatsOutcome",
    "parse_timestamp",
]
