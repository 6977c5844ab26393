"""Typed results of best-effort side effects.

Effects never raise into the dispatcher; each one reports an
:class:`EffectOutcome` which the dispatcher logs.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Effect(StrEnum):
    FETCH_ETA = "fetch_eta"
    COMPLETE_TRIP = "complete_trip"


class EffectStatus(StrEnum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    DUPLICATE = "duplicate"
    FAILED = "failed"


class EffectOutcome(BaseModel):
    """Result of running one transition effect."""

    model_config = ConfigDict(frozen=True)

    effect: Effect
    status: EffectStatus
    target: str = ""
    detail: str = ""
    error_code: str | None = None

    @property
    def ok(self) -> bool:
        return self.status != EffectStatus.FAILED


class StatsOutcome(StrEnum):
    APPLIED = "applied"
    DUPLICATE = "duplicate"
