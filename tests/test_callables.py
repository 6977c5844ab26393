from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from pyfleet.callables import CallContext, compute_route, optimize_route
from pyfleet.config import FleetConfig
from pyfleet.exceptions import FleetCallableError, FleetTransportError
from pyfleet.oracle import RouteOracleClient

_ROUTE_REQUEST = {"originLat": 40.0, "originLng": -73.0, "destLat": 40.7, "destLng": -74.0}
_AUTHED = CallContext(auth_uid="user-1")


class _FakeTransport:
    def __init__(self, body: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self._body = body or {}
        self._error = error
        self.calls = 0

    async def get_json(self, path: str, params: Mapping[str, str]) -> dict[str, Any]:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._body


def _oracle(transport: _FakeTransport, token: str | None = "sk.secret") -> RouteOracleClient:
    return RouteOracleClient(FleetConfig(oracle_token=token), transport=transport)


_OK_ROUTE = {"code": "Ok", "routes": [{"geometry": "poly6", "distance": 5000.0, "duration": 600.0}]}


@pytest.mark.asyncio
async def test_compute_route_success() -> None:
    result = await compute_route(_oracle(_FakeTransport(_OK_ROUTE)), _ROUTE_REQUEST, _AUTHED)

    assert result == {"polyline": "poly6", "distanceMeters": 5000, "durationSeconds": 600}


@pytest.mark.asyncio
@pytest.mark.parametrize("context", [None, CallContext(), CallContext(auth_uid="  ")])
async def test_unauthenticated_caller_rejected_first(context: CallContext | None) -> None:
    transport = _FakeTransport(_OK_ROUTE)

    with pytest.raises(FleetCallableError) as exc_info:
        await compute_route(_oracle(transport, token=None), {}, context)

    assert exc_info.value.code == "unauthenticated"
    assert transport.calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [
        {},
        {"originLat": 40.0, "originLng": -73.0, "destLat": 40.7},
        {**_ROUTE_REQUEST, "destLat": "north"},
        {**_ROUTE_REQUEST, "originLat": 120.0},
        None,
        ["not", "a", "mapping"],
    ],
)
async def test_compute_route_invalid_argument(data: Any) -> None:
    transport = _FakeTransport(_OK_ROUTE)

    with pytest.raises(FleetCallableError) as exc_info:
        await compute_route(_oracle(transport), data, _AUTHED)

    assert exc_info.value.code == "invalid-argument"
    assert transport.calls == 0


@pytest.mark.asyncio
async def test_zero_coordinates_are_not_missing() -> None:
    data = {"originLat": 0.0, "originLng": 0.0, "destLat": 0.1, "destLng": 0.0}

    result = await compute_route(_oracle(_FakeTransport(_OK_ROUTE)), data, _AUTHED)

    assert result["distanceMeters"] == 5000


@pytest.mark.asyncio
async def test_missing_secret_is_failed_precondition() -> None:
    with pytest.raises(FleetCallableError) as exc_info:
        await compute_route(_oracle(_FakeTransport(_OK_ROUTE), token=None), _ROUTE_REQUEST, _AUTHED)

    assert exc_info.value.code == "failed-precondition"


@pytest.mark.asyncio
async def test_not_found_surfaces_verbatim() -> None:
    transport = _FakeTransport({"code": "Ok", "routes": []})

    with pytest.raises(FleetCallableError) as exc_info:
        await compute_route(_oracle(transport), _ROUTE_REQUEST, _AUTHED)

    assert exc_info.value.to_payload()["code"] == "not-found"


@pytest.mark.asyncio
async def test_transport_failure_is_internal() -> None:
    transport = _FakeTransport(error=FleetTransportError("timed out"))

    with pytest.raises(FleetCallableError) as exc_info:
        await compute_route(_oracle(transport), _ROUTE_REQUEST, _AUTHED)

    assert exc_info.value.code == "internal"


@pytest.mark.asyncio
async def test_unexpected_exception_is_internal_without_details() -> None:
    transport = _FakeTransport(error=RuntimeError("secret stack detail"))

    with pytest.raises(FleetCallableError) as exc_info:
        await compute_route(_oracle(transport), _ROUTE_REQUEST, _AUTHED)

    assert exc_info.value.to_payload() == {"code": "internal", "message": "Route calculation failed."}


@pytest.mark.asyncio
async def test_optimize_route_success() -> None:
    transport = _FakeTransport(
        {
            "code": "Ok",
            "trips": [{"geometry": "trip", "distance": 900.0, "duration": 120.0}],
            "waypoints": [{"waypoint_index": 0}, {"waypoint_index": 2}, {"waypoint_index": 1}],
        }
    )
    data = {"waypoints": [{"lat": 1.0, "lng": 1.0}, {"lat": 2.0, "lng": 2.0}, {"lat": 3.0, "lng": 3.0}]}

    result = await optimize_route(_oracle(transport), data, _AUTHED)

    assert result == {"polyline": "trip", "distanceMeters": 900, "durationSeconds": 120, "waypointOrder": [0, 2, 1]}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "data",
    [
        {},
        {"waypoints": []},
        {"waypoints": [{"lat": 1.0, "lng": 1.0}]},
        {"waypoints": [{"lat": 1.0, "lng": 1.0}, {"lat": 2.0}]},
        {"waypoints": "1,1;2,2"},
    ],
)
async def test_optimize_route_invalid_argument(data: dict[str, Any]) -> None:
    transport = _FakeTransport()

    with pytest.raises(FleetCallableError) as exc_info:
        await optimize_route(_oracle(transport), data, _AUTHED)

    assert exc_info.value.code == "invalid-argument"
    assert transport.calls == 0


@pytest.mark.asyncio
async def test_optimize_route_requires_auth() -> None:
    with pytest.raises(FleetCallableError) as exc_info:
        await optimize_route(_oracle(_FakeTransport()), {"waypoints": []}, None)

    assert exc_info.value.code == "unauthenticated"
