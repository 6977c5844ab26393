"""Optimization endpoint: reorder intermediate stops for a shorter trip.

The first and last waypoints are fixed endpoints; only the stops between
them are reordered.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pyfleet._api._common import (
    base_params,
    check_response,
    join_coordinates,
    parse_route,
    require_token,
)
from pyfleet._constants import OPTIMIZATION_PATH
from pyfleet._transport import Transport
from pyfleet.config import FleetConfig
from pyfleet.exceptions import FleetTransportError
from pyfleet.models.location import Coordinate
from pyfleet.models.route import OptimizedRoute

_logger = logging.getLogger(__name__)


def _parse_waypoint_order(endpoint: str, waypoints: Any, expected: int) -> list[int]:
    """Read ``waypoint_index`` for every input waypoint, in input order."""
    got = len(waypoints) if isinstance(waypoints, list) else 0
    if got != expected:
        raise FleetTransportError(
            f"Expected {expected} waypoints from {endpoint}, got {got}",
            endpoint=endpoint,
        )
    order: list[int] = []
    for waypoint in waypoints:
        index = waypoint.get("waypoint_index") if isinstance(waypoint, Mapping) else None
        if not isinstance(index, int) or isinstance(index, bool):
            raise FleetTransportError(f"Waypoint without waypoint_index from {endpoint}", endpoint=endpoint)
        order.append(index)
    return order


async def fetch_optimized_trip(
    config: FleetConfig,
    transport: Transport,
    waypoints: Sequence[Coordinate],
) -> OptimizedRoute:
    """Fetch an optimized trip through *waypoints* (already validated, ≥ 2)."""
    token = require_token(config)
    path = OPTIMIZATION_PATH.format(
        profile=config.routing_profile,
        coordinates=join_coordinates(waypoints),
    )
    params = base_params(token)
    params.update({"roundtrip": "false", "source": "first", "destination": "last"})

    body = await transport.get_json(path, params)
    trips = check_response(path, body, "trips")
    fields = parse_route(path, trips[0])
    order = _parse_waypoint_order(path, body.get("waypoints"), len(waypoints))

    _logger.debug("Optimized %d waypoints: order=%s", len(waypoints), order)
    return OptimizedRoute(**fields, waypoint_order=order)
