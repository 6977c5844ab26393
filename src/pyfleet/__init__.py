"""pyfleet - event-reaction core for a logistics backend."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyfleet")
except PackageNotFoundError:
    __version__ = "0+local"
from pyfleet.callables import CallContext, compute_route, optimize_route
from pyfleet.config import FleetConfig
from pyfleet.dispatcher import EventDispatcher
from pyfleet.exceptions import (
    FleetApiError,
    FleetCallableError,
    FleetConfigError,
    FleetConflictError,
    FleetError,
    FleetInternalError,
    FleetInvalidArgumentError,
    FleetNotFoundError,
    FleetOracleAuthError,
    FleetTransportError,
    FleetUnauthenticatedError,
)
from pyfleet.geo import great_circle_distance_meters, initial_bearing_degrees
from pyfleet.machine import ShipmentStateMachine
from pyfleet.models import (
    Coordinate,
    DriverRecord,
    Effect,
    EffectOutcome,
    EffectStatus,
    LocationSample,
    OptimizedRoute,
    RouteResult,
    ShipmentRecord,
    ShipmentStatus,
    StatsOutcome,
)
from pyfleet.oracle import RouteOracleClient
from pyfleet.state.events import ChangeNotification, DriverLocationChanged, ShipmentStatusChanged
from pyfleet.state.store import SERVER_TIMESTAMP, Document, DocumentStore, Increment, InMemoryDocumentStore
from pyfleet.stats import DriverStatsUpdater
from pyfleet.validator import Accept, Decision, LocationValidator, Reject, RevertTo

__all__ = [
    "__version__",
    "Accept",
    "CallContext",
    "ChangeNotification",
    "Coordinate",
    "Decision",
    "Document",
    "DocumentStore",
    "DriverLocationChanged",
    "DriverRecord",
    "DriverStatsUpdater",
    "Effect",
    "EffectOutcome",
    "EffectStatus",
    "EventDispatcher",
    "FleetApiError",
    "FleetCallableError",
    "FleetConfig",
    "FleetConfigError",
    "FleetConflictError",
    "FleetError",
    "FleetInternalError",
    "FleetInvalidArgumentError",
    "FleetNotFoundError",
    "FleetOracleAuthError",
    "FleetTransportError",
    "FleetUnauthenticatedError",
    "InMemoryDocumentStore",
    "Increment",
    "LocationSample",
    "LocationValidator",
    "OptimizedRoute",
    "Reject",
    "RevertTo",
    "RouteOracleClient",
    "RouteResult",
    "SERVER_TIMESTAMP",
    "ShipmentRecord",
    "ShipmentStateMachine",
    "ShipmentStatus",
    "ShipmentStatusChanged",
    "StatsOutcome",
    "compute_route",
    "great_circle_distance_meters",
    "initial_bearing_degrees",
    "optimize_route",
]
