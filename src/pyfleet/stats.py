"""Driver trip statistics.

``increment`` is one conditional write against the driver document. It is
retried on version conflicts, never partially applied.

Completion notifications may be delivered more than once. When the caller
passes an ``idempotency_key`` (the shipment id), keys already present in
the driver's ``recentCompletionKeys`` ledger are reported as duplicates
and not counted again. Without a key, or once a key has aged out of the
bounded ledger, a redelivery is counted twice.
"""

from __future__ import annotations

import logging

from pyfleet._constants import DRIVERS
from pyfleet.exceptions import FleetConflictError, FleetNotFoundError
from pyfleet.models.outcomes import StatsOutcome
from pyfleet.state.store import DocumentStore, Increment

_logger = logging.getLogger(__name__)


class DriverStatsUpdater:
    """Apply trip-completion mutations to driver records."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        ledger_size: int = 32,
        max_attempts: int = 5,
    ) -> None:
        if ledger_size < 1:
            raise ValueError(f"ledger_size must be at least 1, got {ledger_size}")
        self._store = store
        self._ledger_size = ledger_size
        self._max_attempts = max(1, max_attempts)

    async def increment(self, driver_id: str, *, idempotency_key: str | None = None) -> StatsOutcome:
        """Count one completed trip and clear the current assignment.

        Raises
        ------
        FleetNotFoundError
            If the driver document does not exist.
        FleetConflictError
            If every attempt lost against a concurrent writer.
        """
        for attempt in range(1, self._max_attempts + 1):
            document = await self._store.get(DRIVERS, driver_id)
            if document is None:
                raise FleetNotFoundError(f"Driver {driver_id} not found")

            ledger = [str(k) for k in document.data.get("recentCompletionKeys") or []]
            if idempotency_key is not None and idempotency_key in ledger:
                _logger.info("Completion %s already counted for driver %s", idempotency_key, driver_id)
                return StatsOutcome.DUPLICATE

            patch: dict[str, object] = {
                "totalTrips": Increment(1),
                "currentShipmentId": None,
            }
            if idempotency_key is not None:
                ledger.append(idempotency_key)
                patch["recentCompletionKeys"] = ledger[-self._ledger_size :]

            try:
                await self._store.update(DRIVERS, driver_id, patch, expected_version=document.version)
            except FleetConflictError:
                _logger.debug(
                    "Driver %s changed during stats update (attempt %d/%d)",
                    driver_id,
                    attempt,
                    self._max_attempts,
                )
                continue
            return StatsOutcome.APPLIED

        raise FleetConflictError(f"Driver {driver_id} stats update lost {self._max_attempts} races")
