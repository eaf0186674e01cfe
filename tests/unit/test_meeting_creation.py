"""Tests for ``Meeting.create`` and ``change_main_attributes``."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from meetings.core.clock import SimClock
from meetings.core.enums import AttendeeRole
from meetings.core.errors import RuleViolation
from meetings.domain.events import (
    MeetingAttendeeAdded,
    MeetingCreated,
    MeetingMainAttributesChanged,
)
from meetings.domain.meeting import Meeting
from meetings.domain.rules import CapacityCoversActiveAttendeesRule
from meetings.domain.values import Location, MeetingTerm, MoneyValue, Term

from tests.factories import CREATOR, END, GROUP_ID, NOW, START, make_meeting


class TestCreate:
    def test_creator_becomes_sole_host_without_host_list(self):
        meeting = make_meeting(host_ids=[])

        assert len(meeting.active_attendees) == 1
        host = meeting.active_attendees[0]
        assert host.member_id == CREATOR
        assert host.role is AttendeeRole.HOST
        assert host.guests_number == 0
        assert host.fee == MoneyValue.ZERO

    def test_explicit_hosts_exclude_creator(self):
        meeting = make_meeting(host_ids=["alice", "bob"])

        members = [a.member_id for a in meeting.active_attendees]
        assert members == ["alice", "bob"]
        assert all(a.role is AttendeeRole.HOST for a in meeting.active_attendees)
        assert CREATOR not in members
        assert meeting.active_host_count == 2

    def test_duplicate_host_ids_collapse(self):
        meeting = make_meeting(host_ids=["alice", "alice"])
        assert meeting.active_host_count == 1

    def test_attributes_and_stamps(self):
        clock = SimClock(NOW)
        meeting = make_meeting(clock, attendees_limit=10, id_factory=lambda: "m-42")

        assert meeting.id == "m-42"
        assert meeting.group_id == GROUP_ID
        assert meeting.title == "Python meetup"
        assert meeting.term == MeetingTerm(START, END)
        assert meeting.attendees_limit == 10
        assert meeting.guests_limit == 2
        assert meeting.creator_id == CREATOR
        assert meeting.created_at == NOW
        assert meeting.attendees[0].signed_up_at == NOW
        assert meeting.is_canceled is False
        assert meeting.changed_at is None

    def test_rsvp_term_clamped_to_start(self):
        meeting = make_meeting(rsvp_term=Term(NOW, START + timedelta(days=3)))
        assert meeting.rsvp_term == Term(NOW, START)

    def test_open_rsvp_term_clamped_to_start(self):
        meeting = make_meeting(rsvp_term=Term())
        assert meeting.rsvp_term == Term(None, START)

    def test_early_rsvp_term_kept(self):
        rsvp = Term(NOW, NOW + timedelta(days=2))
        assert make_meeting(rsvp_term=rsvp).rsvp_term == rsvp

    def test_emits_created_then_host_events(self):
        meeting = make_meeting(host_ids=["alice", "bob"], id_factory=lambda: "m-1")
        events = meeting.domain_events

        assert isinstance(events[0], MeetingCreated)
        assert events[0].meeting_id == "m-1"
        assert events[0].creator_id == CREATOR
        assert events[0].timestamp == NOW
        added = [e for e in events if isinstance(e, MeetingAttendeeAdded)]
        assert [e.member_id for e in added] == ["alice", "bob"]
        assert all(e.role == "host" for e in added)

    def test_meeting_ids_are_unique(self):
        assert make_meeting().id != make_meeting().id

    def test_direct_construction_rejected(self):
        with pytest.raises(TypeError, match="Meeting.create"):
            Meeting(object())
        with pytest.raises(TypeError):
            Meeting()  # type: ignore[call-arg]


class TestChangeMainAttributes:
    def _change(self, meeting, **overrides):
        params = {
            "title": "Renamed",
            "term": MeetingTerm(START + timedelta(days=1), END + timedelta(days=1)),
            "description": "New agenda",
            "location": Location("Other place"),
            "attendees_limit": 20,
            "guests_limit": 1,
            "rsvp_term": Term(),
            "event_fee": MoneyValue(Decimal("15"), "EUR"),
            "modify_member_id": "alice",
        }
        params.update(overrides)
        meeting.change_main_attributes(**params)

    def test_replaces_attributes(self, meeting, clock):
        clock.advance(hours=1)
        self._change(meeting)

        assert meeting.title == "Renamed"
        assert meeting.description == "New agenda"
        assert meeting.location == Location("Other place")
        assert meeting.attendees_limit == 20
        assert meeting.guests_limit == 1
        assert meeting.event_fee == MoneyValue(Decimal("15"), "EUR")
        assert meeting.rsvp_term.end == START + timedelta(days=1)
        assert meeting.changed_by == "alice"
        assert meeting.changed_at == NOW + timedelta(hours=1)

    def test_emits_event(self, meeting):
        self._change(meeting)
        (event,) = meeting.domain_events
        assert isinstance(event, MeetingMainAttributesChanged)
        assert event.changed_by == "alice"

    def test_capacity_cannot_shrink_below_headcount(self, meeting, directory):
        meeting.add_attendee(directory, "alice", 2)  # host 1 + alice 3 = 4
        before = meeting.snapshot()

        with pytest.raises(RuleViolation) as exc_info:
            self._change(meeting, attendees_limit=3)

        assert isinstance(exc_info.value.rule, CapacityCoversActiveAttendeesRule)
        assert meeting.snapshot() == before

    def test_capacity_can_shrink_to_headcount(self, meeting, directory):
        meeting.add_attendee(directory, "alice", 2)
        self._change(meeting, attendees_limit=4)
        assert meeting.attendees_limit == 4

    def test_not_blocked_after_start(self, meeting, clock):
        # Documented asymmetry: no start check in this operation.
        clock.set_time(START + timedelta(minutes=5))
        self._change(meeting)
        assert meeting.title == "Renamed"
