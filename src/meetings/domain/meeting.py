"""Meeting aggregate root.

The Meeting is the only entry point for changing attendance state.  Every
public operation follows the same shape:

1.  Build the ordered list of rules for the operation.
2.  ``check_rules``: the first broken rule raises ``RuleViolation`` and
    the aggregate is left exactly as it was.
3.  Mutate the owned collections.
4.  Append domain events to the internal log.

The caller persists the aggregate and then drains the log with
:meth:`Meeting.pull_domain_events`.  The aggregate never dispatches.

Known asymmetries:

*  ``remove_attendee`` does not promote from the waitlist; only a
   decline that supersedes an active attendance does.
*  ``change_main_attributes`` does not check the start rule.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from meetings.core.clock import IClock, WallClock
from meetings.core.enums import AttendeeRole
from meetings.core.errors import MeetingsError
from meetings.core.ids import new_id
from meetings.core.interfaces import IGroupMembership

from .attendance import Attendee, NotAttendee, WaitlistEntry
from .events import (
    DomainEvent,
    MeetingAttendeeAdded,
    MeetingAttendeeDecisionChanged,
    MeetingAttendeeFeePaid,
    MeetingAttendeeRemoved,
    MeetingAttendeeRoleSet,
    MeetingCanceled,
    MeetingCreated,
    MeetingHostRoleSet,
    MeetingMainAttributesChanged,
    MeetingNotAttendeeAdded,
    MeetingNotAttendeeDecisionChanged,
    MeetingWaitlistMemberAdded,
    MeetingWaitlistMemberPromoted,
    MeetingWaitlistMemberSignedOff,
)
from .rules import (
    ActiveDeclineExistsRule,
    ActiveWaitlistEntryExistsRule,
    AtLeastOneHostRule,
    AttendeeIsGroupMemberRule,
    AttendeesWithinCapacityRule,
    CapacityCoversActiveAttendeesRule,
    FeePayerIsActiveAttendeeRule,
    GuestsWithinLimitRule,
    MeetingNotStartedRule,
    RemovedAttendeeIsActiveRule,
    RoleChangerIsHostOrOrganizerRule,
    RoleTargetIsActiveAttendeeRule,
    SingleActiveAttendanceRule,
    SingleActiveDeclineRule,
    SingleActiveWaitlistEntryRule,
    WaitlistCandidateIsEligibleRule,
    WithinRsvpWindowRule,
    check_rules,
)
from .values import Location, MeetingTerm, MoneyValue, Term, effective_rsvp_term

logger = logging.getLogger(__name__)

_FACTORY_TOKEN = object()


class Meeting:
    """A scheduled group event with attendance tracking.

    Built only by :meth:`Meeting.create`; calling the class directly
    raises ``TypeError``.
    """

    def __init__(self, token: object, clock: IClock | None = None) -> None:
        if token is not _FACTORY_TOKEN:
            raise TypeError("Meeting instances are built by Meeting.create()")
        self._clock: IClock = clock or WallClock()
        self._id = ""
        self._group_id = ""
        self._title = ""
        self._description = ""
        self._term: MeetingTerm | None = None
        self._location = Location()
        self._attendees: list[Attendee] = []
        self._not_attendees: list[NotAttendee] = []
        self._waitlist: list[WaitlistEntry] = []
        self._attendees_limit: int | None = None
        self._guests_limit = 0
        self._rsvp_term = Term()
        self._event_fee = MoneyValue.ZERO
        self._creator_id = ""
        self._created_at: datetime | None = None
        self._changed_by: str | None = None
        self._changed_at: datetime | None = None
        self._canceled_at: datetime | None = None
        self._canceled_by: str | None = None
        self._is_canceled = False
        self._events: list[DomainEvent] = []

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        group_id: str,
        title: str,
        term: MeetingTerm,
        description: str,
        location: Location,
        attendees_limit: int | None,
        guests_limit: int,
        rsvp_term: Term,
        event_fee: MoneyValue,
        host_ids: Sequence[str],
        creator_id: str,
        *,
        clock: IClock | None = None,
        id_factory: Callable[[], str] = new_id,
    ) -> Meeting:
        """Create a meeting with at least one host.

        Every id in *host_ids* becomes an active host; with no hosts the
        creator is the sole host.
        """
        meeting = cls(_FACTORY_TOKEN, clock)
        now = meeting._now()

        meeting._id = id_factory()
        meeting._group_id = group_id
        meeting._title = title
        meeting._term = term
        meeting._description = description
        meeting._location = location
        meeting._attendees_limit = attendees_limit
        meeting._guests_limit = guests_limit
        meeting._rsvp_term = effective_rsvp_term(rsvp_term, term)
        meeting._event_fee = event_fee
        meeting._creator_id = creator_id
        meeting._created_at = now

        meeting._record(MeetingCreated(
            timestamp=now,
            meeting_id=meeting._id,
            group_id=group_id,
            creator_id=creator_id,
        ))

        # Duplicates collapse so a member holds one active record
        for host_id in list(dict.fromkeys(host_ids)) or [creator_id]:
            meeting._append_attendee(
                host_id, now, AttendeeRole.HOST, 0, MoneyValue.ZERO, now,
            )

        logger.info(
            "Meeting %s created in group %s by %s (%d host(s))",
            meeting._id, group_id, creator_id, meeting.active_host_count,
        )
        return meeting

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def change_main_attributes(
        self,
        title: str,
        term: MeetingTerm,
        description: str,
        location: Location,
        attendees_limit: int | None,
        guests_limit: int,
        rsvp_term: Term,
        event_fee: MoneyValue,
        modify_member_id: str,
    ) -> None:
        check_rules(
            CapacityCoversActiveAttendeesRule(
                attendees_limit, self.active_attendees_with_guests,
            ),
        )

        now = self._now()
        self._title = title
        self._term = term
        self._description = description
        self._location = location
        self._attendees_limit = attendees_limit
        self._guests_limit = guests_limit
        self._rsvp_term = effective_rsvp_term(rsvp_term, term)
        self._event_fee = event_fee
        self._changed_at = now
        self._changed_by = modify_member_id

        self._record(MeetingMainAttributesChanged(
            timestamp=now, meeting_id=self._id, changed_by=modify_member_id,
        ))
        logger.info("Meeting %s main attributes changed by %s", self._id, modify_member_id)

    def add_attendee(
        self,
        membership: IGroupMembership,
        member_id: str,
        guests_number: int,
    ) -> None:
        now = self._now()
        check_rules(
            MeetingNotStartedRule(self.term, now),
            WithinRsvpWindowRule(self._rsvp_term, now),
            AttendeeIsGroupMemberRule(membership, self._group_id, member_id),
            SingleActiveAttendanceRule(member_id, self._attendees),
            GuestsWithinLimitRule(self._guests_limit, guests_number),
            AttendeesWithinCapacityRule(
                self._attendees_limit, self.active_attendees_with_guests, guests_number,
            ),
        )

        not_attendee = self._active_not_attendee(member_id)
        if not_attendee is not None:
            not_attendee._change_decision(now)

        self._append_attendee(
            member_id, now, AttendeeRole.ATTENDEE, guests_number, self._event_fee, now,
        )
        logger.info(
            "Member %s joined meeting %s with %d guest(s)", member_id, self._id, guests_number,
        )

    def add_not_attendee(self, member_id: str) -> None:
        now = self._now()
        check_rules(
            MeetingNotStartedRule(self.term, now),
            SingleActiveDeclineRule(self._not_attendees, member_id),
            AtLeastOneHostRule(self._hosts_without(member_id)),
        )

        previous = next(
            (n for n in self._not_attendees if n.member_id == member_id), None,
        )
        if previous is not None:
            previous._change_decision(now)
        else:
            self._not_attendees.append(NotAttendee(self._id, member_id))
        self._record(MeetingNotAttendeeAdded(
            timestamp=now, meeting_id=self._id, member_id=member_id,
        ))

        entry = self._active_waitlist_entry(member_id)
        if entry is not None:
            entry._sign_off(now)
            self._record(MeetingWaitlistMemberSignedOff(
                timestamp=now, meeting_id=self._id, member_id=member_id,
            ))

        attendee = self._active_attendee(member_id)
        if attendee is not None:
            attendee._change_decision(now)
            self._record(MeetingAttendeeDecisionChanged(
                timestamp=now, meeting_id=self._id, member_id=member_id,
            ))
            self._promote_next_from_waitlist(now)
        logger.info("Member %s declined meeting %s", member_id, self._id)

    def change_not_attendee_decision(self, member_id: str) -> None:
        now = self._now()
        check_rules(
            MeetingNotStartedRule(self.term, now),
            ActiveDeclineExistsRule(self._not_attendees, member_id),
        )

        not_attendee = self._active_not_attendee(member_id)
        assert not_attendee is not None
        not_attendee._change_decision(now)
        self._record(MeetingNotAttendeeDecisionChanged(
            timestamp=now, meeting_id=self._id, member_id=member_id,
        ))

    def sign_up_member_to_waitlist(
        self,
        membership: IGroupMembership,
        member_id: str,
    ) -> None:
        now = self._now()
        check_rules(
            MeetingNotStartedRule(self.term, now),
            WithinRsvpWindowRule(self._rsvp_term, now),
            WaitlistCandidateIsEligibleRule(
                membership, self._group_id, member_id, self._attendees,
            ),
            SingleActiveWaitlistEntryRule(self._waitlist, member_id),
        )

        self._waitlist.append(WaitlistEntry(self._id, member_id, now))
        self._record(MeetingWaitlistMemberAdded(
            timestamp=now, meeting_id=self._id, member_id=member_id,
        ))
        logger.info("Member %s joined the waitlist of meeting %s", member_id, self._id)

    def sign_off_member_from_waitlist(self, member_id: str) -> None:
        now = self._now()
        check_rules(
            MeetingNotStartedRule(self.term, now),
            ActiveWaitlistEntryExistsRule(self._waitlist, member_id),
        )

        entry = self._active_waitlist_entry(member_id)
        assert entry is not None
        entry._sign_off(now)
        self._record(MeetingWaitlistMemberSignedOff(
            timestamp=now, meeting_id=self._id, member_id=member_id,
        ))

    def set_host_role(
        self,
        membership: IGroupMembership,
        setting_member_id: str,
        member_id: str,
    ) -> None:
        now = self._now()
        self._check_role_change(membership, setting_member_id, member_id, now)

        attendee = self._active_attendee(member_id)
        assert attendee is not None
        attendee._set_as_host()
        self._record(MeetingHostRoleSet(
            timestamp=now, meeting_id=self._id,
            member_id=member_id, set_by=setting_member_id,
        ))

    def set_attendee_role(
        self,
        membership: IGroupMembership,
        setting_member_id: str,
        member_id: str,
    ) -> None:
        now = self._now()
        self._check_role_change(membership, setting_member_id, member_id, now)

        attendee = self._active_attendee(member_id)
        assert attendee is not None
        check_rules(AtLeastOneHostRule(self._hosts_without(member_id)))

        attendee._set_as_attendee()
        self._record(MeetingAttendeeRoleSet(
            timestamp=now, meeting_id=self._id,
            member_id=member_id, set_by=setting_member_id,
        ))

    def cancel(self, cancel_member_id: str) -> None:
        """Cancel the meeting.  Idempotent: a second call is a no-op."""
        now = self._now()
        check_rules(MeetingNotStartedRule(self.term, now))

        if self._is_canceled:
            return

        self._is_canceled = True
        self._canceled_at = now
        self._canceled_by = cancel_member_id
        self._record(MeetingCanceled(
            timestamp=now, meeting_id=self._id,
            canceled_by=cancel_member_id, canceled_at=now,
        ))
        logger.info("Meeting %s canceled by %s", self._id, cancel_member_id)

    def remove_attendee(self, member_id: str, removing_member_id: str, reason: str) -> None:
        now = self._now()
        check_rules(
            MeetingNotStartedRule(self.term, now),
            RemovedAttendeeIsActiveRule(self._attendees, member_id),
            AtLeastOneHostRule(self._hosts_without(member_id)),
        )

        attendee = self._active_attendee(member_id)
        assert attendee is not None
        attendee._remove(removing_member_id, reason, now)
        self._record(MeetingAttendeeRemoved(
            timestamp=now, meeting_id=self._id, member_id=member_id,
            removed_by=removing_member_id, reason=reason,
        ))
        logger.info(
            "Member %s removed from meeting %s by %s", member_id, self._id, removing_member_id,
        )

    def mark_attendee_fee_as_paid(self, member_id: str) -> None:
        check_rules(FeePayerIsActiveAttendeeRule(self._attendees, member_id))

        attendee = self._active_attendee(member_id)
        assert attendee is not None
        if attendee.fee_paid:
            return
        now = self._now()
        attendee._mark_fee_as_paid(now)
        self._record(MeetingAttendeeFeePaid(
            timestamp=now, meeting_id=self._id, member_id=member_id,
        ))

    # ------------------------------------------------------------------
    # Domain event log
    # ------------------------------------------------------------------

    @property
    def domain_events(self) -> tuple[DomainEvent, ...]:
        return tuple(self._events)

    def pull_domain_events(self) -> list[DomainEvent]:
        """Return buffered events in emission order and clear the log."""
        events, self._events = self._events, []
        return events

    def clear_domain_events(self) -> None:
        self._events.clear()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._id

    @property
    def group_id(self) -> str:
        return self._group_id

    @property
    def title(self) -> str:
        return self._title

    @property
    def description(self) -> str:
        return self._description

    @property
    def term(self) -> MeetingTerm:
        if self._term is None:
            raise MeetingsError(f"Meeting {self._id!r} has no term")
        return self._term

    @property
    def location(self) -> Location:
        return self._location

    @property
    def attendees(self) -> tuple[Attendee, ...]:
        return tuple(self._attendees)

    @property
    def not_attendees(self) -> tuple[NotAttendee, ...]:
        return tuple(self._not_attendees)

    @property
    def waitlist(self) -> tuple[WaitlistEntry, ...]:
        return tuple(self._waitlist)

    @property
    def attendees_limit(self) -> int | None:
        return self._attendees_limit

    @property
    def guests_limit(self) -> int:
        return self._guests_limit

    @property
    def rsvp_term(self) -> Term:
        return self._rsvp_term

    @property
    def event_fee(self) -> MoneyValue:
        return self._event_fee

    @property
    def creator_id(self) -> str:
        return self._creator_id

    @property
    def created_at(self) -> datetime | None:
        return self._created_at

    @property
    def changed_by(self) -> str | None:
        return self._changed_by

    @property
    def changed_at(self) -> datetime | None:
        return self._changed_at

    @property
    def canceled_at(self) -> datetime | None:
        return self._canceled_at

    @property
    def canceled_by(self) -> str | None:
        return self._canceled_by

    @property
    def is_canceled(self) -> bool:
        return self._is_canceled

    @property
    def active_attendees(self) -> tuple[Attendee, ...]:
        return tuple(a for a in self._attendees if a.is_active)

    @property
    def active_attendees_with_guests(self) -> int:
        return sum(a.headcount for a in self._attendees if a.is_active)

    @property
    def active_host_count(self) -> int:
        return sum(1 for a in self._attendees if a.is_active_host)

    def snapshot(self) -> dict[str, Any]:
        """Deep plain-dict copy of the full state (events excluded)."""
        return copy.deepcopy({
            "id": self._id,
            "group_id": self._group_id,
            "title": self._title,
            "description": self._description,
            "term": self._term,
            "location": self._location,
            "attendees": [a.to_dict() for a in self._attendees],
            "not_attendees": [n.to_dict() for n in self._not_attendees],
            "waitlist": [w.to_dict() for w in self._waitlist],
            "attendees_limit": self._attendees_limit,
            "guests_limit": self._guests_limit,
            "rsvp_term": self._rsvp_term,
            "event_fee": self._event_fee,
            "creator_id": self._creator_id,
            "created_at": self._created_at,
            "changed_by": self._changed_by,
            "changed_at": self._changed_at,
            "canceled_at": self._canceled_at,
            "canceled_by": self._canceled_by,
            "is_canceled": self._is_canceled,
        })

    def __repr__(self) -> str:
        return (
            f"Meeting(id={self._id!r}, title={self._title!r}, "
            f"attendees={len(self.active_attendees)}, canceled={self._is_canceled})"
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _now(self) -> datetime:
        return self._clock.now()

    def _record(self, event: DomainEvent) -> None:
        self._events.append(event)

    def _check_role_change(
        self,
        membership: IGroupMembership,
        setting_member_id: str,
        member_id: str,
        now: datetime,
    ) -> None:
        check_rules(
            MeetingNotStartedRule(self.term, now),
            RoleChangerIsHostOrOrganizerRule(
                membership, self._group_id, setting_member_id, self._attendees,
            ),
            RoleTargetIsActiveAttendeeRule(self._attendees, member_id),
        )

    def _hosts_without(self, member_id: str) -> int:
        return sum(
            1 for a in self._attendees if a.is_active_host and a.member_id != member_id
        )

    def _append_attendee(
        self,
        member_id: str,
        signed_up_at: datetime,
        role: AttendeeRole,
        guests_number: int,
        fee: MoneyValue,
        now: datetime,
    ) -> Attendee:
        attendee = Attendee(self._id, member_id, signed_up_at, role, guests_number, fee)
        self._attendees.append(attendee)
        self._record(MeetingAttendeeAdded(
            timestamp=now,
            meeting_id=self._id,
            member_id=member_id,
            role=role.value,
            guests_number=guests_number,
            fee_amount=fee.amount,
            fee_currency=fee.currency,
        ))
        return attendee

    def _promote_next_from_waitlist(self, now: datetime) -> None:
        """Fill the vacated slot with the earliest eligible waitlist entry.

        ``sorted`` is stable, so equal signup times keep registration order.
        Members who already attend or currently decline are passed over and
        their entries stay active.  Nobody is promoted when one more
        attendee would exceed the capacity.
        """
        if (
            self._attendees_limit is not None
            and self.active_attendees_with_guests + 1 > self._attendees_limit
        ):
            return
        candidates = sorted(
            (
                w for w in self._waitlist
                if w.is_active
                and self._active_attendee(w.member_id) is None
                and self._active_not_attendee(w.member_id) is None
            ),
            key=lambda w: w.signed_up_at,
        )
        if not candidates:
            return
        entry = candidates[0]
        self._append_attendee(
            entry.member_id, entry.signed_up_at, AttendeeRole.ATTENDEE, 0,
            self._event_fee, now,
        )
        entry._mark_promoted(now)
        self._record(MeetingWaitlistMemberPromoted(
            timestamp=now, meeting_id=self._id,
            member_id=entry.member_id, signed_up_at=entry.signed_up_at,
        ))
        logger.info("Member %s promoted from waitlist of meeting %s", entry.member_id, self._id)

    def _active_attendee(self, member_id: str) -> Attendee | None:
        return next((a for a in self._attendees if a.is_active_attendee(member_id)), None)

    def _active_not_attendee(self, member_id: str) -> NotAttendee | None:
        return next(
            (n for n in self._not_attendees if n.is_active_not_attendee(member_id)), None,
        )

    def _active_waitlist_entry(self, member_id: str) -> WaitlistEntry | None:
        return next((w for w in self._waitlist if w.is_active_on_waitlist(member_id)), None)
