"""Protocol interfaces for the meetings collaborators.

All module boundaries are defined here as Protocol classes.
Implementations can be swapped (in-memory / database / remote) without
changing the aggregate or the application service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from meetings.domain.meeting import Meeting


# ---------------------------------------------------------------------------
# Group membership
# ---------------------------------------------------------------------------

@runtime_checkable
class IGroupMembership(Protocol):
    """Read model answering membership questions about a meeting group.

    Consumed synchronously by rule objects; failures propagate unchanged.
    """

    def is_member(self, group_id: str, member_id: str) -> bool: ...

    def is_organizer(self, group_id: str, member_id: str) -> bool: ...


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

@runtime_checkable
class IMeetingRepository(Protocol):
    """Load/save boundary for Meeting aggregates."""

    async def add(self, meeting: Meeting) -> None: ...

    async def get(self, meeting_id: str) -> Meeting:
        """Return the meeting or raise ``MeetingNotFoundError``."""
        ...

    async def save(self, meeting: Meeting) -> None: ...
