"""Shared helpers for oracle endpoint modules.

This module centralizes:
- coercing caller input into validated coordinates
- the credential and common query parameters
- mapping oracle application codes to exceptions
- parsing the canonical (first) route

It is internal to pyfleet and may change at any time.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from pyfleet._constants import ORACLE_INVALID_INPUT_CODES, ORACLE_NOT_FOUND_CODES, ORACLE_OK
from pyfleet.config import FleetConfig
from pyfleet.exceptions import (
    FleetApiError,
    FleetConfigError,
    FleetInvalidArgumentError,
    FleetNotFoundError,
    FleetTransportError,
)
from pyfleet.models.location import Coordinate, LocationSample
from pyfleet.models.route import RouteResult


def coerce_coordinate(value: Any, name: str) -> Coordinate:
    """Validate *value* as a coordinate or raise ``FleetInvalidArgumentError``."""
    if value is None:
        raise FleetInvalidArgumentError(f"{name} coordinate is required")
    if isinstance(value, Coordinate):
        return value
    if isinstance(value, LocationSample):
        return Coordinate.from_location(value)
    if not isinstance(value, Mapping):
        raise FleetInvalidArgumentError(f"{name} must be a {{lat, lng}} object")
    try:
        return Coordinate.model_validate(value)
    except ValidationError as exc:
        raise FleetInvalidArgumentError(f"{name} is not a valid coordinate: {exc.error_count()} error(s)") from exc


def require_token(config: FleetConfig) -> str:
    token = (config.oracle_token or "").strip()
    if not token:
        raise FleetConfigError("Routing oracle secret token not configured.")
    return token


def join_coordinates(coordinates: Sequence[Coordinate]) -> str:
    return ";".join(c.as_path_segment() for c in coordinates)


def base_params(token: str) -> dict[str, str]:
    return {
        "access_token": token,
        "geometries": "polyline6",
        "overview": "full",
        "steps": "false",
    }


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def check_response(endpoint: str, body: Mapping[str, Any], list_key: str) -> list[Any]:
    """Map the oracle's ``code`` and return the non-empty result list."""
    code = str(body.get("code", ORACLE_OK))
    message = str(body.get("message", ""))

    if code in ORACLE_NOT_FOUND_CODES:
        raise FleetNotFoundError(f"No route found ({code}): {message}".rstrip(": "))
    if code in ORACLE_INVALID_INPUT_CODES:
        raise FleetInvalidArgumentError(f"Oracle rejected input ({code}): {message}".rstrip(": "))
    if code != ORACLE_OK:
        raise FleetApiError(
            f"{endpoint} failed: code={code} message={message}",
            oracle_code=code,
            endpoint=endpoint,
        )

    items = body.get(list_key)
    if items is None:
        raise FleetTransportError(f"Missing '{list_key}' in response from {endpoint}", endpoint=endpoint)
    if not isinstance(items, list):
        raise FleetTransportError(f"'{list_key}' from {endpoint} is not a list", endpoint=endpoint)
    if not items:
        raise FleetNotFoundError("No route found between the specified points.")
    return items


def parse_route(endpoint: str, item: Any) -> dict[str, Any]:
    """Extract ``RouteResult`` fields from a ``routes[0]`` / ``trips[0]`` element."""
    if not isinstance(item, Mapping):
        raise FleetTransportError(f"Unexpected route shape from {endpoint}", endpoint=endpoint)
    geometry = item.get("geometry")
    distance = item.get("distance")
    duration = item.get("duration")
    if not isinstance(geometry, str):
        raise FleetTransportError(f"Route geometry from {endpoint} is not an encoded polyline", endpoint=endpoint)
    if not isinstance(distance, (int, float)) or not isinstance(duration, (int, float)):
        raise FleetTransportError(f"Route from {endpoint} lacks numeric distance/duration", endpoint=endpoint)
    return {
        "polyline_encoded": geometry,
        "distance_meters": round_half_up(float(distance)),
        "duration_seconds": round_half_up(float(duration)),
    }


def to_route_result(endpoint: str, item: Any) -> RouteResult:
    return RouteResult(**parse_route(endpoint, item))
