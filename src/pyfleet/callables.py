"""Callable requests: ``computeRoute`` and ``optimizeRoute``.

Callers wait synchronously, so every error kind is surfaced to them as a
:class:`~pyfleet.exceptions.FleetCallableError` with its code. Unexpected
failures become ``internal`` without leaking details.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pyfleet.exceptions import (
    FleetCallableError,
    FleetError,
    FleetInvalidArgumentError,
    FleetUnauthenticatedError,
)
from pyfleet.models._base import FleetBaseModel
from pyfleet.models.location import Coordinate
from pyfleet.models.route import OptimizedRoute, RouteResult

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class RoutingOracle(Protocol):
    async def route(self, origin: Any, destination: Any) -> RouteResult: ...

    async def optimize(self, waypoints: Sequence[Any]) -> OptimizedRoute: ...


class CallContext(BaseModel):
    """Identity of the caller, as verified by the hosting platform."""

    model_config = ConfigDict(frozen=True)

    auth_uid: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.auth_uid and self.auth_uid.strip())


class ComputeRouteRequest(FleetBaseModel):
    origin_lat: float = Field(ge=-90.0, le=90.0)
    origin_lng: float = Field(ge=-180.0, le=180.0)
    dest_lat: float = Field(ge=-90.0, le=90.0)
    dest_lng: float = Field(ge=-180.0, le=180.0)

    @property
    def origin(self) -> Coordinate:
        return Coordinate(lat=self.origin_lat, lng=self.origin_lng)

    @property
    def destination(self) -> Coordinate:
        return Coordinate(lat=self.dest_lat, lng=self.dest_lng)


class OptimizeRouteRequest(FleetBaseModel):
    waypoints: list[Coordinate] = Field(min_length=2)


def _require_auth(context: CallContext | None) -> None:
    if context is None or not context.is_authenticated:
        raise FleetUnauthenticatedError("Must be authenticated to call this function.")


def _parse(model: type[FleetBaseModel], data: Any, message: str) -> Any:
    if not isinstance(data, Mapping):
        raise FleetInvalidArgumentError(message)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise FleetInvalidArgumentError(message) from exc


async def _surface(name: str, failure_message: str, call: Callable[[], Awaitable[T]]) -> T:
    try:
        return await call()
    except FleetCallableError:
        raise
    except FleetError as exc:
        _logger.info("%s rejected: %s (%s)", name, exc, exc.code)
        raise FleetCallableError(exc.code, str(exc)) from exc
    except Exception as exc:
        _logger.error("%s failed unexpectedly", name, exc_info=True)
        raise FleetCallableError("internal", failure_message) from exc


async def compute_route(
    oracle: RoutingOracle,
    data: Any,
    context: CallContext | None,
) -> dict[str, Any]:
    """Handle ``computeRoute``: ``{originLat, originLng, destLat, destLng}``.

    Returns ``{polyline, distanceMeters, durationSeconds}``.
    """

    async def _call() -> dict[str, Any]:
        _require_auth(context)
        request = _parse(ComputeRouteRequest, data, "Origin and destination coordinates are required.")
        result = await oracle.route(request.origin, request.destination)
        return result.to_payload()

    return await _surface("computeRoute", "Route calculation failed.", _call)


async def optimize_route(
    oracle: RoutingOracle,
    data: Any,
    context: CallContext | None,
) -> dict[str, Any]:
    """Handle ``optimizeRoute``: ``{waypoints: [{lat, lng}, ...]}``.

    Returns ``{polyline, distanceMeters, durationSeconds, waypointOrder}``.
    """

    async def _call() -> dict[str, Any]:
        _require_auth(context)
        waypoints = data.get("waypoints") if isinstance(data, Mapping) else None
        if not isinstance(waypoints, list) or len(waypoints) < 2:
            raise FleetInvalidArgumentError("At least 2 waypoints required.")
        request = _parse(OptimizeRouteRequest, data, "Every waypoint needs a valid lat and lng.")
        result = await oracle.optimize(request.waypoints)
        return result.to_payload()

    return await _surface("optimizeRoute", "Route optimization failed.", _call)
