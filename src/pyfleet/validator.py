"""Anti-spoofing check for driver location updates.

The decision is a pure function of two consecutive samples and their
store write timestamps (see :mod:`pyfleet.state.events` for where those
come from). Issuing the compensating write is the caller's job (see
:mod:`pyfleet.dispatcher`), as is rejecting a location that does not
parse at all (:class:`Reject`).

A missing timestamp is replaced by "now" at the point of observation.
That weakens the speed estimate (a missing previous timestamp makes the
elapsed time look shorter, a missing next one longer) but an update is
never rejected only because a timestamp is absent.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from pyfleet._constants import DEFAULT_MAX_SPEED_KMH
from pyfleet.geo import great_circle_distance_meters
from pyfleet.models.location import LocationSample


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Accept:
    """Keep the new location.

    ``speed_kmh`` is ``None`` when no rate could be evaluated.
    """

    distance_meters: float = 0.0
    elapsed_seconds: float | None = None
    speed_kmh: float | None = None


@dataclass(frozen=True, slots=True)
class RevertTo:
    """Restore ``previous``; the update implies an implausible speed."""

    previous: LocationSample
    previous_timestamp: datetime | None
    distance_meters: float
    elapsed_seconds: float
    speed_kmh: float


@dataclass(frozen=True, slots=True)
class Reject:
    """Restore ``previous``; the written location is not a valid position.

    ``previous`` is ``None`` when there is no valid location to go back
    to, in which case the location is cleared.
    """

    previous: LocationSample | None
    reason: str


Decision = Accept | RevertTo | Reject


class LocationValidator:
    """Accept or reject a location update based on physical plausibility."""

    def __init__(
        self,
        *,
        max_speed_kmh: float = DEFAULT_MAX_SPEED_KMH,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if max_speed_kmh <= 0:
            raise ValueError(f"max_speed_kmh must be positive, got {max_speed_kmh}")
        self._max_speed_kmh = max_speed_kmh
        self._clock = clock

    @property
    def max_speed_kmh(self) -> float:
        return self._max_speed_kmh

    def validate(
        self,
        previous: LocationSample | None,
        previous_timestamp: datetime | None,
        next_sample: LocationSample,
        next_timestamp: datetime | None,
    ) -> Decision:
        # First ever update: nothing to compare against.
        if previous is None:
            return Accept()

        if previous.same_position(next_sample):
            return Accept()

        distance = great_circle_distance_meters(previous, next_sample)

        now = self._clock()
        started = previous_timestamp or now
        ended = next_timestamp or now
        elapsed = (ended - started).total_seconds()

        # Out-of-order or simultaneous writes cannot be rated.
        if elapsed <= 0:
            return Accept(distance_meters=distance, elapsed_seconds=elapsed)

        speed_kmh = (distance / 1000.0) / (elapsed / 3600.0)
        if speed_kmh > self._max_speed_kmh:
            return RevertTo(
                previous=previous,
                previous_timestamp=previous_timestamp,
                distance_meters=distance,
                elapsed_seconds=elapsed,
                speed_kmh=speed_kmh,
            )
        return Accept(distance_meters=distance, elapsed_seconds=elapsed, speed_kmh=speed_kmh)
