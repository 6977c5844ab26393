"""Document store interface and a deterministic in-memory implementation.

Writes are partial-field updates, optionally conditional on the
document's version. The store stamps its own clock on every write and
remembers when each top-level field last changed; those times travel
with the notification and are the only timestamps clients cannot
forge. Each successful update queues one
:class:`~pyfleet.state.events.ChangeNotification`; subscribers receive
them when :meth:`InMemoryDocumentStore.flush` runs, in write order.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections import deque
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from pyfleet.exceptions import FleetConflictError, FleetNotFoundError
from pyfleet.state.events import ChangeNotification

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()
"""Patch value replaced by the store's clock at write time."""


@dataclass(frozen=True, slots=True)
class Increment:
    """Patch value that adds ``amount`` to the stored number (missing = 0)."""

    amount: int = 1


class Document(BaseModel):
    """A versioned snapshot of one stored document."""

    model_config = ConfigDict(frozen=True)

    collection: str
    document_id: str
    data: dict[str, Any] = Field(default_factory=dict)
    version: int = 0
    update_time: datetime | None = None
    field_times: dict[str, datetime] = Field(default_factory=dict)
    """Store time at which each top-level field last changed value."""


Subscriber = Callable[[ChangeNotification], Awaitable[Any]]


class DocumentStore(Protocol):
    """What the event-reaction core needs from persistent storage."""

    async def get(self, collection: str, document_id: str) -> Document | None: ...

    async def update(
        self,
        collection: str,
        document_id: str,
        patch: Mapping[str, Any],
        *,
        expected_version: int | None = None,
    ) -> Document: ...


def _resolve_patch(current: Mapping[str, Any], patch: Mapping[str, Any], now: datetime) -> dict[str, Any]:
    resolved: dict[str, Any] = {}
    for key, value in patch.items():
        if value is SERVER_TIMESTAMP:
            resolved[key] = now
        elif isinstance(value, Increment):
            existing = current.get(key) or 0
            resolved[key] = existing + value.amount
        else:
            resolved[key] = copy.deepcopy(value)
    return resolved


class InMemoryDocumentStore:
    """In-memory store with per-document versions.

    The version check and the write happen under one lock, so a
    conditional update can never clobber a concurrent newer write.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._documents: dict[tuple[str, str], Document] = {}
        self._lock = asyncio.Lock()
        self._pending: deque[ChangeNotification] = deque()
        self._subscribers: list[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    async def create(self, collection: str, document_id: str, data: Mapping[str, Any]) -> Document:
        """Seed a document. Creation fires no notification (update-only triggers)."""
        async with self._lock:
            key = (collection, document_id)
            if key in self._documents:
                raise FleetConflictError(f"{collection}/{document_id} already exists")
            now = self._clock()
            resolved = _resolve_patch({}, data, now)
            document = Document(
                collection=collection,
                document_id=document_id,
                data=resolved,
                version=1,
                update_time=now,
                field_times=dict.fromkeys(resolved, now),
            )
            self._documents[key] = document
            return document

    async def get(self, collection: str, document_id: str) -> Document | None:
        document = self._documents.get((collection, document_id))
        if document is None:
            return None
        return document.model_copy(update={"data": copy.deepcopy(document.data)})

    async def update(
        self,
        collection: str,
        document_id: str,
        patch: Mapping[str, Any],
        *,
        expected_version: int | None = None,
    ) -> Document:
        """Merge *patch* into the document.

        Raises
        ------
        FleetNotFoundError
            If the document does not exist.
        FleetConflictError
            If ``expected_version`` is given and does not match.
        """
        async with self._lock:
            key = (collection, document_id)
            current = self._documents.get(key)
            if current is None:
                raise FleetNotFoundError(f"{collection}/{document_id} not found")
            if expected_version is not None and current.version != expected_version:
                raise FleetConflictError(
                    f"{collection}/{document_id} is at version {current.version}, expected {expected_version}",
                    expected_version=expected_version,
                    actual_version=current.version,
                )

            now = self._clock()
            resolved = _resolve_patch(current.data, patch, now)
            field_times = dict(current.field_times)
            for name, value in resolved.items():
                if name not in current.data or current.data[name] != value:
                    field_times[name] = now
            data = copy.deepcopy(current.data)
            data.update(resolved)
            updated = Document(
                collection=collection,
                document_id=document_id,
                data=data,
                version=current.version + 1,
                update_time=now,
                field_times=field_times,
            )
            self._documents[key] = updated
            self._pending.append(
                ChangeNotification(
                    collection=collection,
                    document_id=document_id,
                    previous=copy.deepcopy(current.data),
                    new=copy.deepcopy(data),
                    previous_version=current.version,
                    version=updated.version,
                    previous_update_time=current.update_time,
                    update_time=now,
                    previous_field_times=dict(current.field_times),
                    field_times=dict(field_times),
                    observed_at=now,
                )
            )
            return updated

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def flush(self, *, max_deliveries: int = 1000) -> int:
        """Deliver queued notifications, including ones queued by subscribers.

        Returns the number of notifications delivered.
        """
        delivered = 0
        while self._pending:
            if delivered >= max_deliveries:
                _logger.warning("Stopped delivering after %d notifications; %d pending", delivered, len(self._pending))
                break
            notification = self._pending.popleft()
            for subscriber in self._subscribers:
                await subscriber(notification)
            delivered += 1
        return delivered
