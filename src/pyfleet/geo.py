"""Great-circle geometry on a spherical Earth."""

from __future__ import annotations

import math
from typing import Protocol

from pyfleet._constants import EARTH_RADIUS_M


class _Point(Protocol):
    @property
    def latitude(self) -> float: ...

    @property
    def longitude(self) -> float: ...


def great_circle_distance_meters(a: _Point, b: _Point) -> float:
    """Haversine distance between two points, in metres.

    Inputs must already satisfy the latitude/longitude range invariant.
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_M * c


def initial_bearing_degrees(a: _Point, b: _Point) -> float:
    """Forward azimuth from *a* towards *b*, in ``[0, 360)`` degrees."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lon = math.radians(b.longitude - a.longitude)

    x = math.sin(d_lon) * math.cos(lat2)
    y = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(d_lon)
    return (math.degrees(math.atan2(x, y)) + 360.0) % 360.0
