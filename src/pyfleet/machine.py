"""Shipment status state machine.

Runs the side effects of an observed status transition. Effects are
independent: each reports an :class:`~pyfleet.models.EffectOutcome` and a
failure in one never undoes or blocks the other. Applying the status
itself is the external writer's job.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import ValidationError

from pyfleet._constants import DRIVERS, SHIPMENTS
from pyfleet.exceptions import FleetError, FleetTransportError
from pyfleet.models.driver import DriverRecord
from pyfleet.models.outcomes import Effect, EffectOutcome, EffectStatus, StatsOutcome
from pyfleet.models.route import RouteResult
from pyfleet.models.shipment import ShipmentRecord
from pyfleet.state.events import ShipmentStatusChanged
from pyfleet.state.policy import is_allowed_transition, plan_effects
from pyfleet.state.store import DocumentStore
from pyfleet.stats import DriverStatsUpdater

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RouteOracle(Protocol):
    async def route(self, origin: Any, destination: Any) -> RouteResult: ...


class ShipmentStateMachine:
    """Decide and run transition effects for shipment status changes.

    Parameters
    ----------
    store : DocumentStore
        Source of driver snapshots and target of the ETA merge-write.
    oracle : RouteOracle
        Routing oracle; normally a :class:`~pyfleet.oracle.RouteOracleClient`.
    stats : DriverStatsUpdater
        Applies trip-completion counters.
    eta_retry_attempts : int
        Oracle calls per ETA effect when the oracle fails transiently.
    eta_retry_delay : float
        Seconds between ETA attempts.
    clock : callable
        Source of "now" for ``etaTimestamp``.
    """

    def __init__(
        self,
        store: DocumentStore,
        oracle: RouteOracle,
        stats: DriverStatsUpdater,
        *,
        eta_retry_attempts: int = 2,
        eta_retry_delay: float = 1.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._oracle = oracle
        self._stats = stats
        self._eta_retry_attempts = max(1, eta_retry_attempts)
        self._eta_retry_delay = eta_retry_delay
        self._clock = clock

    async def handle(self, event: ShipmentStatusChanged) -> list[EffectOutcome]:
        """Run the effects planned for *event*; same-status writes do nothing."""
        if not event.is_transition:
            return []

        shipment = event.shipment
        _logger.info("Shipment %s status: %s -> %s", shipment.id, event.previous_status, event.new_status)
        if not is_allowed_transition(event.previous_status, event.new_status):
            _logger.warning(
                "Shipment %s took an unexpected transition %s -> %s",
                shipment.id,
                event.previous_status,
                event.new_status,
            )

        effects = plan_effects(event.previous_status, event.new_status, shipment)
        outcomes: list[EffectOutcome] = []
        if Effect.FETCH_ETA in effects:
            outcomes.append(await self._fetch_eta(shipment, event.invalid_fields))
        if Effect.COMPLETE_TRIP in effects:
            outcomes.append(await self._complete_trip(shipment))
        return outcomes

    # ------------------------------------------------------------------
    # ETA
    # ------------------------------------------------------------------

    async def _route_with_retry(self, origin: Any, destination: Any) -> RouteResult:
        attempt = 1
        while True:
            try:
                return await self._oracle.route(origin, destination)
            except FleetTransportError:
                if attempt >= self._eta_retry_attempts:
                    raise
                _logger.info(
                    "Oracle call failed (attempt %d/%d), retrying in %.1fs",
                    attempt,
                    self._eta_retry_attempts,
                    self._eta_retry_delay,
                )
                if self._eta_retry_delay > 0:
                    await asyncio.sleep(self._eta_retry_delay)
                attempt += 1

    async def _fetch_eta(self, shipment: ShipmentRecord, invalid_fields: tuple[str, ...] = ()) -> EffectOutcome:
        target = f"{SHIPMENTS}/{shipment.id}"
        driver_id = shipment.driver_id or ""

        if shipment.destination is None and "destination" in invalid_fields:
            return EffectOutcome(
                effect=Effect.FETCH_ETA,
                status=EffectStatus.FAILED,
                target=target,
                detail="malformed destination",
                error_code="invalid-argument",
            )
        if shipment.destination is None:
            return EffectOutcome(
                effect=Effect.FETCH_ETA,
                status=EffectStatus.SKIPPED,
                target=target,
                detail="no destination",
            )

        document = await self._store.get(DRIVERS, driver_id)
        if document is None:
            return EffectOutcome(
                effect=Effect.FETCH_ETA,
                status=EffectStatus.SKIPPED,
                target=target,
                detail=f"driver {driver_id} not found",
            )
        try:
            driver = DriverRecord.from_document(driver_id, document.data)
        except ValidationError as exc:
            return EffectOutcome(
                effect=Effect.FETCH_ETA,
                status=EffectStatus.FAILED,
                target=target,
                detail=f"malformed driver {driver_id}: {exc.error_count()} error(s)",
                error_code="invalid-argument",
            )
        if driver.current_location is None:
            return EffectOutcome(
                effect=Effect.FETCH_ETA,
                status=EffectStatus.SKIPPED,
                target=target,
                detail=f"driver {driver_id} has no location",
            )

        # No lock is held while waiting on the oracle; the merge below is
        # last-write-wins for the derived fields.
        try:
            route = await self._route_with_retry(driver.current_location, shipment.destination)
            await self._store.update(SHIPMENTS, shipment.id, route.to_shipment_patch(self._clock()))
        except FleetError as exc:
            return EffectOutcome(
                effect=Effect.FETCH_ETA,
                status=EffectStatus.FAILED,
                target=target,
                detail=str(exc),
                error_code=exc.code,
            )

        return EffectOutcome(
            effect=Effect.FETCH_ETA,
            status=EffectStatus.APPLIED,
            target=target,
            detail=f"{route.distance_meters}m / {route.duration_seconds}s",
        )

    # ------------------------------------------------------------------
    # Trip completion
    # ------------------------------------------------------------------

    async def _complete_trip(self, shipment: ShipmentRecord) -> EffectOutcome:
        driver_id = shipment.driver_id or ""
        target = f"{DRIVERS}/{driver_id}"
        try:
            result = await self._stats.increment(driver_id, idempotency_key=shipment.id)
        except FleetError as exc:
            return EffectOutcome(
                effect=Effect.COMPLETE_TRIP,
                status=EffectStatus.FAILED,
                target=target,
                detail=str(exc),
                error_code=exc.code,
            )

        status = EffectStatus.DUPLICATE if result == StatsOutcome.DUPLICATE else EffectStatus.APPLIED
        return EffectOutcome(
            effect=Effect.COMPLETE_TRIP,
            status=status,
            target=target,
            detail=f"shipment {shipment.id}",
        )
