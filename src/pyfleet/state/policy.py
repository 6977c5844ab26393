"""Shipment transition policy.

Pure functions deciding which effects a status change triggers. Status
is set externally, so an unexpected transition is reported but never
rejected here.
"""

from __future__ import annotations

from pyfleet.models.outcomes import Effect
from pyfleet.models.shipment import ShipmentRecord, ShipmentStatus

ALLOWED_TRANSITIONS: dict[ShipmentStatus, frozenset[ShipmentStatus]] = {
    ShipmentStatus.PENDING: frozenset({ShipmentStatus.ACCEPTED, ShipmentStatus.CANCELLED}),
    ShipmentStatus.ACCEPTED: frozenset({ShipmentStatus.IN_TRANSIT, ShipmentStatus.CANCELLED}),
    ShipmentStatus.IN_TRANSIT: frozenset({ShipmentStatus.COMPLETED, ShipmentStatus.CANCELLED}),
}


def is_allowed_transition(previous: ShipmentStatus, new: ShipmentStatus) -> bool:
    """Whether *previous* → *new* follows the nominal lifecycle.

    Nothing leaves a terminal status.
    """
    if previous == new:
        return True
    if previous.is_terminal:
        return False
    return new in ALLOWED_TRANSITIONS.get(previous, frozenset())


def plan_effects(
    previous: ShipmentStatus,
    new: ShipmentStatus,
    shipment: ShipmentRecord,
) -> frozenset[Effect]:
    """Effects to run for an observed status change.

    - ``FETCH_ETA``: ``pending`` → ``accepted`` with a driver assigned.
      Whether the driver's location is known is checked when the effect
      runs.
    - ``COMPLETE_TRIP``: any change into ``completed`` with a driver.
    """
    if previous == new or not shipment.driver_id:
        return frozenset()

    effects: set[Effect] = set()
    if previous == ShipmentStatus.PENDING and new == ShipmentStatus.ACCEPTED:
        effects.add(Effect.FETCH_ETA)
    if new == ShipmentStatus.COMPLETED:
        effects.add(Effect.COMPLETE_TRIP)
    return frozenset(effects)
