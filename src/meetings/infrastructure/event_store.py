"""Append-only log of drained meeting events.

Guarantees
----------
1.  Appends are keyed on ``event.event_id``; a repeated append of the
    same event is dropped, so the service may retry a publish safely.
2.  Every stored event gets a global, gap-free sequence number starting
    at 1.  Reads return events in sequence order.
3.  Each meeting has its own stream.  ``stream(meeting_id)`` yields the
    full history of one aggregate without scanning the others.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import AsyncIterator
from typing import NamedTuple, Protocol

from meetings.domain.events import DomainEvent

logger = logging.getLogger(__name__)


class StoredEvent(NamedTuple):
    sequence: int
    event: DomainEvent


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

class IEventStore(Protocol):
    """Where the application service publishes meeting events."""

    async def append(self, event: DomainEvent) -> None: ...

    async def read(
        self,
        event_type: type[DomainEvent] | None = None,
        meeting_id: str | None = None,
        after_sequence: int | None = None,
        limit: int = 10_000,
    ) -> list[DomainEvent]: ...

    def stream(self, meeting_id: str) -> AsyncIterator[DomainEvent]: ...


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------

class InMemoryEventStore:
    """Process-local event log with a per-meeting index."""

    def __init__(self) -> None:
        self._log: list[StoredEvent] = []
        self._by_meeting: defaultdict[str, list[StoredEvent]] = defaultdict(list)
        self._known: set[str] = set()

    @property
    def last_sequence(self) -> int:
        """Sequence of the newest event, 0 when empty."""
        return self._log[-1].sequence if self._log else 0

    async def append(self, event: DomainEvent) -> None:
        if event.event_id in self._known:
            logger.debug("Event %s already stored", event.event_id)
            return
        record = StoredEvent(self.last_sequence + 1, event)
        self._known.add(event.event_id)
        self._log.append(record)
        self._by_meeting[event.meeting_id].append(record)

    async def read(
        self,
        event_type: type[DomainEvent] | None = None,
        meeting_id: str | None = None,
        after_sequence: int | None = None,
        limit: int = 10_000,
    ) -> list[DomainEvent]:
        """Events with ``sequence > after_sequence``, filtered, oldest first."""
        source = self._log if meeting_id is None else self._by_meeting.get(meeting_id, [])
        floor = after_sequence or 0
        matched = (
            record.event for record in source
            if record.sequence > floor
            and (event_type is None or type(record.event) is event_type)
        )
        return [event for _, event in zip(range(limit), matched)]

    async def stream(self, meeting_id: str) -> AsyncIterator[DomainEvent]:
        for record in self._by_meeting.get(meeting_id, []):
            yield record.event

    def clear(self) -> None:
        self._log.clear()
        self._by_meeting.clear()
        self._known.clear()

    def __len__(self) -> int:
        return len(self._log)
