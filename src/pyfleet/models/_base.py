"""Base model and timestamp helpers for stored documents.

Documents in the store use camelCase keys. Every record model inherits
from :class:`FleetBaseModel` which maps them to snake_case fields via
``alias_generator=to_camel`` and ignores fields owned by other
collaborators.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def parse_timestamp(value: Any) -> datetime | None:
    """Convert an epoch timestamp (seconds **or** milliseconds) to a UTC datetime.

    Datetimes pass through (naive ones are assumed UTC); strings are left
    for pydantic to parse as ISO-8601.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
    if isinstance(value, bool):
        raise ValueError("timestamp must not be a boolean")
    if isinstance(value, (int, float)):
        ts = float(value)
        if ts >= _MS_THRESHOLD:
            ts /= 1000.0
        return datetime.fromtimestamp(ts, tz=UTC)
    return value


FleetTimestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces epoch numbers (seconds or ms) to UTC datetimes."""


class FleetBaseModel(BaseModel):
    """Base for models parsed from stored documents and oracle payloads."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_document(self, *, exclude: set[str] | None = None) -> dict[str, Any]:
        """Dump to a camelCase dict suitable for a partial store write."""
        return self.model_dump(by_alias=True, exclude=exclude, exclude_none=True)
