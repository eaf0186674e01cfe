"""Business rules guarding the Meeting aggregate.

Every invariant is a small, named, side-effect-free predicate.  A rule
answers ``is_broken()`` and describes itself through ``message``.
Operations compose an ordered list of rules and hand it to
:func:`check_rules`, which raises :class:`RuleViolation` on the first
broken one.  No state is touched until the whole list has passed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from meetings.core.errors import RuleViolation
from meetings.core.interfaces import IGroupMembership

from .attendance import Attendee, NotAttendee, WaitlistEntry
from .values import MeetingTerm, Term

logger = logging.getLogger(__name__)


@runtime_checkable
class BusinessRule(Protocol):
    """A single named invariant."""

    @property
    def message(self) -> str:
        """Human-readable description of the violation."""
        ...

    def is_broken(self) -> bool: ...


def check_rules(*rules: BusinessRule) -> None:
    """Evaluate *rules* in order; raise on the first broken one.

    Raises:
        RuleViolation: Carrying the broken rule.
    """
    for rule in rules:
        if rule.is_broken():
            logger.info("Rule broken [%s]: %s", type(rule).__name__, rule.message)
            raise RuleViolation(rule)


def _has_active_attendance(attendees: Iterable[Attendee], member_id: str) -> bool:
    return any(a.is_active_attendee(member_id) for a in attendees)


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MeetingNotStartedRule:
    term: MeetingTerm
    now: datetime

    message = "Meeting cannot be changed after start"

    def is_broken(self) -> bool:
        return self.term.is_after_start(self.now)


@dataclass(frozen=True)
class WithinRsvpWindowRule:
    rsvp_term: Term
    now: datetime

    message = "Attendee can be added only in RSVP term"

    def is_broken(self) -> bool:
        return not self.rsvp_term.contains(self.now)


# ---------------------------------------------------------------------------
# Group membership (external oracle)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AttendeeIsGroupMemberRule:
    membership: IGroupMembership
    group_id: str
    member_id: str

    message = "Meeting attendee must be a member of group"

    def is_broken(self) -> bool:
        return not self.membership.is_member(self.group_id, self.member_id)


@dataclass(frozen=True)
class WaitlistCandidateIsEligibleRule:
    """Waitlist members must belong to the group and not already attend."""

    membership: IGroupMembership
    group_id: str
    member_id: str
    attendees: Sequence[Attendee]

    message = "Member on waitlist must be a member of group and not an attendee"

    def is_broken(self) -> bool:
        if _has_active_attendance(self.attendees, self.member_id):
            return True
        return not self.membership.is_member(self.group_id, self.member_id)


@dataclass(frozen=True)
class HostsAreGroupMembersRule:
    membership: IGroupMembership
    group_id: str
    host_ids: Sequence[str]

    message = "Meeting host must be a member of group"

    def is_broken(self) -> bool:
        return any(
            not self.membership.is_member(self.group_id, host_id)
            for host_id in self.host_ids
        )


@dataclass(frozen=True)
class RoleChangerIsHostOrOrganizerRule:
    membership: IGroupMembership
    group_id: str
    setting_member_id: str
    attendees: Sequence[Attendee]

    message = "Only meeting host or group organizer can set meeting member roles"

    def is_broken(self) -> bool:
        is_host = any(
            a.is_active_host and a.member_id == self.setting_member_id
            for a in self.attendees
        )
        if is_host:
            return False
        return not self.membership.is_organizer(self.group_id, self.setting_member_id)


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SingleActiveAttendanceRule:
    member_id: str
    attendees: Sequence[Attendee]

    message = "Member is already an attendee of this meeting"

    def is_broken(self) -> bool:
        return _has_active_attendance(self.attendees, self.member_id)


@dataclass(frozen=True)
class GuestsWithinLimitRule:
    guests_limit: int
    guests_number: int

    @property
    def message(self) -> str:
        return (
            f"Meeting guests number {self.guests_number} is above limit "
            f"{self.guests_limit}"
        )

    def is_broken(self) -> bool:
        return self.guests_number > self.guests_limit


@dataclass(frozen=True)
class AttendeesWithinCapacityRule:
    attendees_limit: int | None
    active_attendees_with_guests: int
    guests_number: int

    @property
    def message(self) -> str:
        return (
            f"Meeting attendees number is above limit: "
            f"{self.active_attendees_with_guests} + {1 + self.guests_number} "
            f"> {self.attendees_limit}"
        )

    def is_broken(self) -> bool:
        if self.attendees_limit is None:
            return False
        requested = self.active_attendees_with_guests + 1 + self.guests_number
        return requested > self.attendees_limit


@dataclass(frozen=True)
class CapacityCoversActiveAttendeesRule:
    attendees_limit: int | None
    active_attendees_with_guests: int

    @property
    def message(self) -> str:
        return (
            f"Attendees limit cannot be changed to {self.attendees_limit}, "
            f"smaller than active attendees number "
            f"{self.active_attendees_with_guests}"
        )

    def is_broken(self) -> bool:
        if self.attendees_limit is None:
            return False
        return self.attendees_limit < self.active_attendees_with_guests


@dataclass(frozen=True)
class RoleTargetIsActiveAttendeeRule:
    attendees: Sequence[Attendee]
    member_id: str

    message = "Only meeting attendee can have changed role"

    def is_broken(self) -> bool:
        return not _has_active_attendance(self.attendees, self.member_id)


@dataclass(frozen=True)
class AtLeastOneHostRule:
    hosts_number: int

    message = "Meeting must have at least one host"

    def is_broken(self) -> bool:
        return self.hosts_number < 1


@dataclass(frozen=True)
class RemovedAttendeeIsActiveRule:
    attendees: Sequence[Attendee]
    member_id: str

    message = "Only active attendee can be removed from meeting"

    def is_broken(self) -> bool:
        return not _has_active_attendance(self.attendees, self.member_id)


@dataclass(frozen=True)
class FeePayerIsActiveAttendeeRule:
    attendees: Sequence[Attendee]
    member_id: str

    message = "Fee can be marked as paid only for an active attendee"

    def is_broken(self) -> bool:
        return not _has_active_attendance(self.attendees, self.member_id)


# ---------------------------------------------------------------------------
# Declines
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SingleActiveDeclineRule:
    not_attendees: Sequence[NotAttendee]
    member_id: str

    message = "Member cannot be active not attendee twice"

    def is_broken(self) -> bool:
        return any(n.is_active_not_attendee(self.member_id) for n in self.not_attendees)


@dataclass(frozen=True)
class ActiveDeclineExistsRule:
    not_attendees: Sequence[NotAttendee]
    member_id: str

    message = "Member is not an active not attendee"

    def is_broken(self) -> bool:
        return not any(
            n.is_active_not_attendee(self.member_id) for n in self.not_attendees
        )


# ---------------------------------------------------------------------------
# Waitlist
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SingleActiveWaitlistEntryRule:
    waitlist: Sequence[WaitlistEntry]
    member_id: str

    message = "Member cannot be more than once on the meeting waitlist"

    def is_broken(self) -> bool:
        return any(w.is_active_on_waitlist(self.member_id) for w in self.waitlist)


@dataclass(frozen=True)
class ActiveWaitlistEntryExistsRule:
    waitlist: Sequence[WaitlistEntry]
    member_id: str

    message = "Not active member of waitlist cannot be signed off"

    def is_broken(self) -> bool:
        return not any(w.is_active_on_waitlist(self.member_id) for w in self.waitlist)
