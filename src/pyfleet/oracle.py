"""High-level async client for the external routing oracle."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import aiohttp

from pyfleet._api import directions as _directions_api
from pyfleet._api import optimization as _optimization_api
from pyfleet._api._common import coerce_coordinate
from pyfleet._constants import MAX_OPTIMIZATION_WAYPOINTS
from pyfleet._transport import HttpTransport, Transport
from pyfleet.config import FleetConfig
from pyfleet.exceptions import FleetInternalError, FleetInvalidArgumentError
from pyfleet.models.route import OptimizedRoute, RouteResult


class RouteOracleClient:
    """Thin adapter over the directions and optimization APIs.

    Each call issues at most one outbound request and never retries;
    retry policy belongs to the caller. Input is validated before any
    I/O.

    Usage::

        async with RouteOracleClient(config) as oracle:
            route = await oracle.route(origin, destination)
    """

    def __init__(
        self,
        config: FleetConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._owns_transport = transport is None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RouteOracleClient:
        if self._owns_transport:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if self._owns_transport:
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise FleetInternalError("Client not initialized. Use 'async with RouteOracleClient(...) as oracle:'")
        return self._transport

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    async def route(self, origin: Any, destination: Any) -> RouteResult:
        """Fastest route between two points.

        *origin* and *destination* may be :class:`~pyfleet.models.Coordinate`,
        :class:`~pyfleet.models.LocationSample` or ``{lat, lng}`` mappings.

        Raises
        ------
        FleetInvalidArgumentError
            Missing or out-of-range coordinate (no request is sent).
        FleetConfigError
            Oracle token not configured.
        FleetOracleAuthError
            Oracle rejected the token.
        FleetNotFoundError
            Oracle found no route.
        FleetTransportError
            Timeout, network failure or unexpected response.
        """
        origin_coord = coerce_coordinate(origin, "origin")
        destination_coord = coerce_coordinate(destination, "destination")
        return await _directions_api.fetch_route(
            self._config,
            self._require_transport(),
            origin_coord,
            destination_coord,
        )

    async def optimize(self, waypoints: Sequence[Any]) -> OptimizedRoute:
        """Reorder intermediate stops for minimal total distance.

        The first and last waypoints stay fixed. Raises the same errors as
        :meth:`route`, plus ``FleetInvalidArgumentError`` for fewer than 2 or
        more than the oracle's maximum number of waypoints.
        """
        if waypoints is None or isinstance(waypoints, (str, bytes)) or not isinstance(waypoints, Sequence):
            raise FleetInvalidArgumentError("waypoints must be a list of {lat, lng} objects")
        if len(waypoints) < 2:
            raise FleetInvalidArgumentError("At least 2 waypoints required.")
        if len(waypoints) > MAX_OPTIMIZATION_WAYPOINTS:
            raise FleetInvalidArgumentError(f"At most {MAX_OPTIMIZATION_WAYPOINTS} waypoints supported.")
        coords = [coerce_coordinate(w, f"waypoints[{i}]") for i, w in enumerate(waypoints)]
        return await _optimization_api.fetch_optimized_trip(
            self._config,
            self._require_transport(),
            coords,
        )
