"""Boundary between the outside world and the event-reaction core.

Store notifications are converted to typed events and routed to the
location validator or the shipment state machine. Callable requests are
forwarded to :mod:`pyfleet.callables`.
"""

from __future__ import annotations

import logging
from typing import Any

from pyfleet._constants import DRIVERS, LAST_UPDATED_FIELD, LOCATION_FIELD
from pyfleet.callables import CallContext, RoutingOracle, compute_route, optimize_route
from pyfleet.config import FleetConfig
from pyfleet.exceptions import FleetConflictError, FleetInvalidArgumentError, FleetNotFoundError
from pyfleet.machine import ShipmentStateMachine
from pyfleet.models.outcomes import EffectOutcome, EffectStatus
from pyfleet.state.events import (
    ChangeNotification,
    DriverLocationChanged,
    ShipmentStatusChanged,
    to_event,
)
from pyfleet.state.store import DocumentStore
from pyfleet.stats import DriverStatsUpdater
from pyfleet.validator import Accept, Decision, LocationValidator, Reject, RevertTo

_logger = logging.getLogger(__name__)


class EventDispatcher:
    """Route notifications and requests to the core components.

    The notification caused by one of its own compensating writes is
    recognised by the document version that write produced, so the same
    dispatcher instance must receive both notifications.

    Usage::

        dispatcher = EventDispatcher.from_config(config, store, oracle)
        store.subscribe(dispatcher.dispatch)
    """

    def __init__(
        self,
        store: DocumentStore,
        oracle: RoutingOracle,
        validator: LocationValidator,
        machine: ShipmentStateMachine,
    ) -> None:
        self._store = store
        self._oracle = oracle
        self._validator = validator
        self._machine = machine
        # driver id -> document version written by our own revert
        self._reverted: dict[str, int] = {}

    @classmethod
    def from_config(cls, config: FleetConfig, store: DocumentStore, oracle: RoutingOracle) -> EventDispatcher:
        stats = DriverStatsUpdater(store, ledger_size=config.completion_ledger_size)
        machine = ShipmentStateMachine(
            store,
            oracle,
            stats,
            eta_retry_attempts=config.eta_retry_attempts,
            eta_retry_delay=config.eta_retry_delay,
        )
        return cls(store, oracle, LocationValidator(max_speed_kmh=config.max_speed_kmh), machine)

    # ------------------------------------------------------------------
    # Store notifications
    # ------------------------------------------------------------------

    async def dispatch(self, notification: ChangeNotification) -> Decision | list[EffectOutcome] | None:
        """Handle one change notification.

        Returns the validator decision for driver location changes, the
        effect outcomes for shipment updates, and ``None`` when nothing
        applies.
        """
        try:
            event = to_event(notification)
        except FleetInvalidArgumentError as exc:
            _logger.warning("Ignoring %s: %s", notification.path, exc)
            return None

        if isinstance(event, DriverLocationChanged):
            return await self.handle_location(event)
        if isinstance(event, ShipmentStatusChanged):
            return await self.handle_shipment(event)
        return None

    async def handle_location(self, event: DriverLocationChanged) -> Decision:
        if event.version is not None and self._reverted.get(event.driver_id) == event.version:
            del self._reverted[event.driver_id]
            _logger.debug("Driver %s location restored by revert", event.driver_id)
            return Accept()

        if event.new_location is None:
            reason = event.rejected_reason or "malformed location"
            _logger.warning("Rejected location update from driver %s: %s", event.driver_id, reason)
            await self._revert_location(event)
            return Reject(previous=event.previous_location, reason=reason)

        decision = self._validator.validate(
            event.previous_location,
            event.previous_timestamp,
            event.new_location,
            event.new_timestamp,
        )
        if isinstance(decision, RevertTo):
            _logger.warning(
                "Suspicious location update from driver %s: %.1f km/h over %.0fm",
                event.driver_id,
                decision.speed_kmh,
                decision.distance_meters,
            )
            await self._revert_location(event)
        return decision

    async def _revert_location(self, event: DriverLocationChanged) -> None:
        previous = event.previous_location
        patch: dict[str, Any] = {
            LOCATION_FIELD: previous.to_document() if previous is not None else None,
            LAST_UPDATED_FIELD: event.previous_last_updated,
        }
        # Fenced on the version that carried the rejected location, so a
        # newer write is never overwritten.
        try:
            document = await self._store.update(DRIVERS, event.driver_id, patch, expected_version=event.version)
        except FleetConflictError as exc:
            _logger.info(
                "Driver %s moved on (version %s, expected %s); revert abandoned",
                event.driver_id,
                exc.actual_version,
                exc.expected_version,
            )
            return
        except FleetNotFoundError:
            _logger.warning("Driver %s disappeared before revert", event.driver_id)
            return
        self._reverted[event.driver_id] = document.version

    async def handle_shipment(self, event: ShipmentStatusChanged) -> list[EffectOutcome]:
        outcomes = await self._machine.handle(event)
        for outcome in outcomes:
            if outcome.status == EffectStatus.FAILED:
                _logger.warning(
                    "Effect %s on %s failed (%s): %s",
                    outcome.effect,
                    outcome.target,
                    outcome.error_code,
                    outcome.detail,
                )
            else:
                _logger.info("Effect %s on %s %s: %s", outcome.effect, outcome.target, outcome.status, outcome.detail)
        return outcomes

    # ------------------------------------------------------------------
    # Callable requests
    # ------------------------------------------------------------------

    async def compute_route(self, data: Any, context: CallContext | None) -> dict[str, Any]:
        return await compute_route(self._oracle, data, context)

    async def optimize_route(self, data: Any, context: CallContext | None) -> dict[str, Any]:
        return await optimize_route(self._oracle, data, context)
