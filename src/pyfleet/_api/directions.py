"""Directions endpoint: fastest route between two points."""

from __future__ import annotations

import logging

from pyfleet._api._common import base_params, check_response, join_coordinates, require_token, to_route_result
from pyfleet._constants import DIRECTIONS_PATH
from pyfleet._transport import Transport
from pyfleet.config import FleetConfig
from pyfleet.models.location import Coordinate
from pyfleet.models.route import RouteResult

_logger = logging.getLogger(__name__)


async def fetch_route(
    config: FleetConfig,
    transport: Transport,
    origin: Coordinate,
    destination: Coordinate,
) -> RouteResult:
    """Fetch the oracle's top-ranked route from *origin* to *destination*.

    Raises
    ------
    FleetConfigError
        If the oracle token is missing.
    FleetNotFoundError
        If the oracle reports no viable route.
    FleetTransportError
        On timeout, network failure or an unexpected response.
    """
    token = require_token(config)
    path = DIRECTIONS_PATH.format(
        profile=config.routing_profile,
        coordinates=join_coordinates([origin, destination]),
    )
    body = await transport.get_json(path, base_params(token))
    routes = check_response(path, body, "routes")
    result = to_route_result(path, routes[0])
    _logger.debug(
        "Route %s -> %s: %dm %ds",
        origin.as_path_segment(),
        destination.as_path_segment(),
        result.distance_meters,
        result.duration_seconds,
    )
    return result
