"""Tests for the domain event types and the aggregate's event log."""

from __future__ import annotations

import dataclasses

import pytest

from meetings.core.errors import RuleViolation
from meetings.domain.events import (
    ALL_DOMAIN_EVENTS,
    DomainEvent,
    MeetingCanceled,
    MeetingNotAttendeeAdded,
)


class TestEventTypes:
    def test_events_are_frozen(self):
        event = MeetingNotAttendeeAdded(meeting_id="m-1", member_id="alice")
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.member_id = "bob"  # type: ignore[misc]

    def test_event_ids_are_unique(self):
        ids = {MeetingCanceled(meeting_id="m-1").event_id for _ in range(50)}
        assert len(ids) == 50

    def test_timestamp_is_aware(self):
        assert MeetingCanceled().timestamp.tzinfo is not None

    def test_registry_lists_concrete_events(self):
        assert len(ALL_DOMAIN_EVENTS) == len(set(ALL_DOMAIN_EVENTS)) == 14
        assert all(issubclass(cls, DomainEvent) for cls in ALL_DOMAIN_EVENTS)
        assert DomainEvent not in ALL_DOMAIN_EVENTS


class TestEventLog:
    def test_pull_drains_in_emission_order(self, meeting, directory):
        meeting.add_attendee(directory, "alice", 0)
        meeting.add_not_attendee("alice")

        events = meeting.pull_domain_events()

        names = [type(e).__name__ for e in events]
        assert names == [
            "MeetingAttendeeAdded",
            "MeetingNotAttendeeAdded",
            "MeetingAttendeeDecisionChanged",
        ]
        assert meeting.domain_events == ()

    def test_events_carry_meeting_id(self, meeting, directory):
        meeting.add_attendee(directory, "alice", 0)
        assert all(e.meeting_id == meeting.id for e in meeting.domain_events)

    def test_rejected_operation_emits_nothing(self, meeting, directory):
        with pytest.raises(RuleViolation):
            meeting.add_attendee(directory, "outsider", 0)
        assert meeting.domain_events == ()
