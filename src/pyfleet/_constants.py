"""Internal constants shared across the library."""

ORACLE_BASE_URL = "https://api.mapbox.com"
USER_AGENT = "pyfleet/aiohttp"

#: Mean Earth radius used by the Haversine formula, in metres.
EARTH_RADIUS_M = 6_371_000.0

#: Maximum plausible ground speed for a delivery truck.
DEFAULT_MAX_SPEED_KMH = 200.0

DIRECTIONS_PATH = "/directions/v5/mapbox/{profile}/{coordinates}"
OPTIMIZATION_PATH = "/optimized-trips/v1/mapbox/{profile}/{coordinates}"

# The Optimization v1 API accepts at most 12 coordinates per request.
MAX_OPTIMIZATION_WAYPOINTS = 12

# Oracle application codes (the ``code`` field of a response body).
ORACLE_OK = "Ok"
ORACLE_NOT_FOUND_CODES: frozenset[str] = frozenset({"NoRoute", "NoTrips", "NoSegment"})
ORACLE_INVALID_INPUT_CODES: frozenset[str] = frozenset(
    {"InvalidInput", "NotImplemented", "ProfileNotFound", "NoRoundtrip"}
)

DRIVERS = "drivers"
SHIPMENTS = "shipments"

# Driver fields owned by the location validator.
LOCATION_FIELD = "currentLocation"
LAST_UPDATED_FIELD = "lastUpdated"
