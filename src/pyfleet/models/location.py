"""Location value types."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pyfleet.models._base import FleetBaseModel, FleetTimestamp


class LocationSample(FleetBaseModel):
    """A single position fix reported by a driver's device.

    Parameters
    ----------
    latitude : float
        Degrees, in ``[-90, 90]``.
    longitude : float
        Degrees, in ``[-180, 180]``.
    captured_at : datetime or None
        Client-side capture time. Informational only; speed checks use
        the store's write timestamp.
    accuracy_meters : float or None
        Reported horizontal accuracy.
    """

    latitude: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(
        ge=-180.0,
        le=180.0,
        validation_alias=AliasChoices("longitude", "lng", "lon"),
    )
    captured_at: FleetTimestamp = None
    accuracy_meters: float | None = Field(default=None, ge=0.0)

    def same_position(self, other: LocationSample) -> bool:
        return self.latitude == other.latitude and self.longitude == other.longitude


class Coordinate(FleetBaseModel):
    """A ``{lat, lng}`` pair: shipment destinations and route waypoints."""

    lat: float = Field(ge=-90.0, le=90.0, validation_alias=AliasChoices("lat", "latitude"))
    lng: float = Field(ge=-180.0, le=180.0, validation_alias=AliasChoices("lng", "longitude", "lon"))

    @property
    def latitude(self) -> float:
        return self.lat

    @property
    def longitude(self) -> float:
        return self.lng

    @classmethod
    def from_location(cls, location: LocationSample) -> Coordinate:
        return cls(lat=location.latitude, lng=location.longitude)

    def as_path_segment(self) -> str:
        """Oracle path order is ``lng,lat``."""
        return f"{self.lng},{self.lat}"
