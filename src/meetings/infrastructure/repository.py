"""In-memory meeting repository.

Keeps aggregates by id in a dict.  There is no optimistic concurrency:
callers sharing one instance must serialize operations on a meeting.
"""

from __future__ import annotations

import logging

from meetings.core.errors import MeetingNotFoundError
from meetings.domain.meeting import Meeting

logger = logging.getLogger(__name__)


class InMemoryMeetingRepository:
    """Dict-backed :class:`~meetings.core.interfaces.IMeetingRepository`."""

    def __init__(self) -> None:
        self._meetings: dict[str, Meeting] = {}

    async def add(self, meeting: Meeting) -> None:
        if meeting.id in self._meetings:
            raise ValueError(f"Meeting {meeting.id} already stored")
        self._meetings[meeting.id] = meeting
        logger.debug("Meeting %s added", meeting.id)

    async def get(self, meeting_id: str) -> Meeting:
        try:
            return self._meetings[meeting_id]
        except KeyError:
            raise MeetingNotFoundError(meeting_id) from None

    async def save(self, meeting: Meeting) -> None:
        if meeting.id not in self._meetings:
            raise MeetingNotFoundError(meeting.id)
        self._meetings[meeting.id] = meeting

    def __len__(self) -> int:
        return len(self._meetings)
