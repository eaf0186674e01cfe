"""Domain events emitted by the Meeting aggregate.

Design invariants
-----------------
1.  Every event is **immutable** (``frozen=True``).
2.  Events are only ever created inside ``Meeting`` operations, after
    every rule of the operation has passed.
3.  ``event_id`` is a UUID4 generated at creation time; it serves as the
    idempotency / dedup key in the event store.
4.  ``timestamp`` is stamped from the aggregate's clock, never from the
    wall clock directly, so tests stay deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from meetings.core.ids import new_id as _uuid
from meetings.core.ids import utc_now as _now

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DomainEvent:
    """Immutable base for every meeting domain event.

    Shared fields
    ~~~~~~~~~~~~~
    event_id        Unique identity (UUID4).  Idempotency key.
    timestamp       UTC time the change happened.
    meeting_id      Aggregate that produced the event.
    """

    event_id: str = field(default_factory=_uuid)
    timestamp: datetime = field(default_factory=_now)
    meeting_id: str = ""


# =========================================================================
# Meeting lifecycle
# =========================================================================

@dataclass(frozen=True)
class MeetingCreated(DomainEvent):
    group_id: str = ""
    creator_id: str = ""


@dataclass(frozen=True)
class MeetingMainAttributesChanged(DomainEvent):
    changed_by: str = ""


@dataclass(frozen=True)
class MeetingCanceled(DomainEvent):
    canceled_by: str = ""
    canceled_at: datetime | None = None


# =========================================================================
# Attendance
# =========================================================================

@dataclass(frozen=True)
class MeetingAttendeeAdded(DomainEvent):
    member_id: str = ""
    role: str = ""
    guests_number: int = 0
    fee_amount: Decimal = Decimal("0")
    fee_currency: str = ""


@dataclass(frozen=True)
class MeetingAttendeeDecisionChanged(DomainEvent):
    """An active attendance was superseded by a decline."""

    member_id: str = ""


@dataclass(frozen=True)
class MeetingAttendeeRemoved(DomainEvent):
    member_id: str = ""
    removed_by: str = ""
    reason: str = ""


@dataclass(frozen=True)
class MeetingAttendeeFeePaid(DomainEvent):
    member_id: str = ""


@dataclass(frozen=True)
class MeetingHostRoleSet(DomainEvent):
    member_id: str = ""
    set_by: str = ""


@dataclass(frozen=True)
class MeetingAttendeeRoleSet(DomainEvent):
    member_id: str = ""
    set_by: str = ""


# =========================================================================
# Declines
# =========================================================================

@dataclass(frozen=True)
class MeetingNotAttendeeAdded(DomainEvent):
    member_id: str = ""


@dataclass(frozen=True)
class MeetingNotAttendeeDecisionChanged(DomainEvent):
    member_id: str = ""


# =========================================================================
# Waitlist
# =========================================================================

@dataclass(frozen=True)
class MeetingWaitlistMemberAdded(DomainEvent):
    member_id: str = ""


@dataclass(frozen=True)
class MeetingWaitlistMemberSignedOff(DomainEvent):
    member_id: str = ""


@dataclass(frozen=True)
class MeetingWaitlistMemberPromoted(DomainEvent):
    member_id: str = ""
    signed_up_at: datetime | None = None


#: All meeting event types in a deterministic order.
ALL_DOMAIN_EVENTS: tuple[type[DomainEvent], ...] = (
    MeetingCreated,
    MeetingMainAttributesChanged,
    MeetingCanceled,
    MeetingAttendeeAdded,
    MeetingAttendeeDecisionChanged,
    MeetingAttendeeRemoved,
    MeetingAttendeeFeePaid,
    MeetingHostRoleSet,
    MeetingAttendeeRoleSet,
    MeetingNotAttendeeAdded,
    MeetingNotAttendeeDecisionChanged,
    MeetingWaitlistMemberAdded,
    MeetingWaitlistMemberSignedOff,
    MeetingWaitlistMemberPromoted,
)
