"""Every attendance mutation is frozen once the meeting has started."""

from __future__ import annotations

from datetime import timedelta

import pytest

from meetings.core.errors import RuleViolation
from meetings.domain.rules import MeetingNotStartedRule

from tests.factories import CREATOR, START

OPERATIONS = {
    "add_attendee": lambda m, d: m.add_attendee(d, "carol", 0),
    "add_not_attendee": lambda m, d: m.add_not_attendee("carol"),
    "change_not_attendee_decision": lambda m, d: m.change_not_attendee_decision("bob"),
    "sign_up_member_to_waitlist": lambda m, d: m.sign_up_member_to_waitlist(d, "carol"),
    "sign_off_member_from_waitlist": lambda m, d: m.sign_off_member_from_waitlist("dave"),
    "set_host_role": lambda m, d: m.set_host_role(d, CREATOR, "alice"),
    "set_attendee_role": lambda m, d: m.set_attendee_role(d, CREATOR, CREATOR),
    "cancel": lambda m, d: m.cancel(CREATOR),
    "remove_attendee": lambda m, d: m.remove_attendee("alice", CREATOR, "late"),
}


@pytest.fixture
def started_meeting(meeting, directory, clock):
    meeting.add_attendee(directory, "alice", 0)
    meeting.add_not_attendee("bob")
    meeting.sign_up_member_to_waitlist(directory, "dave")
    meeting.clear_domain_events()
    clock.set_time(START + timedelta(seconds=1))
    return meeting


@pytest.mark.parametrize("op", sorted(OPERATIONS))
def test_rejected_after_start(op, started_meeting, directory):
    before = started_meeting.snapshot()

    with pytest.raises(RuleViolation) as exc_info:
        OPERATIONS[op](started_meeting, directory)

    assert isinstance(exc_info.value.rule, MeetingNotStartedRule)
    assert started_meeting.snapshot() == before
    assert started_meeting.domain_events == ()


def test_allowed_exactly_at_start(meeting, directory, clock):
    clock.set_time(START)
    meeting.cancel(CREATOR)
    assert meeting.is_canceled
