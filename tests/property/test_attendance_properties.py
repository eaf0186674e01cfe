"""Property tests: attendance invariants under arbitrary operation sequences.

Strategy: drive one meeting through a random sequence of operations by
random members.  Rejected operations must leave the aggregate untouched
and emit nothing; accepted ones must keep every structural invariant.
"""

from collections import Counter
from datetime import timedelta

from hypothesis import given, settings, strategies as st

from meetings.core.clock import SimClock
from meetings.core.errors import RuleViolation

from tests.factories import CREATOR, MEMBERS, NOW, ORGANIZER, make_directory, make_meeting

ACTORS = (CREATOR, ORGANIZER, "outsider", *MEMBERS)

_OPS = {
    "attend": lambda m, d, a, b, g: m.add_attendee(d, a, g),
    "decline": lambda m, d, a, b, g: m.add_not_attendee(a),
    "undecline": lambda m, d, a, b, g: m.change_not_attendee_decision(a),
    "wait": lambda m, d, a, b, g: m.sign_up_member_to_waitlist(d, a),
    "unwait": lambda m, d, a, b, g: m.sign_off_member_from_waitlist(a),
    "host": lambda m, d, a, b, g: m.set_host_role(d, a, b),
    "demote": lambda m, d, a, b, g: m.set_attendee_role(d, a, b),
    "remove": lambda m, d, a, b, g: m.remove_attendee(b, a, "reason"),
    "pay": lambda m, d, a, b, g: m.mark_attendee_fee_as_paid(a),
}

steps = st.lists(
    st.tuples(
        st.sampled_from(sorted(_OPS)),
        st.sampled_from(ACTORS),
        st.sampled_from(ACTORS),
        st.integers(min_value=0, max_value=3),
        st.integers(min_value=0, max_value=120),
    ),
    max_size=40,
)


def _assert_invariants(meeting) -> None:
    active = Counter(a.member_id for a in meeting.active_attendees)
    assert all(n == 1 for n in active.values()), active

    declines = Counter(n.member_id for n in meeting.not_attendees)
    assert all(n == 1 for n in declines.values()), declines

    waiting = Counter(w.member_id for w in meeting.waitlist if w.is_active)
    assert all(n == 1 for n in waiting.values()), waiting

    declining = {n.member_id for n in meeting.not_attendees if n.is_active}
    assert not declining & set(active), declining & set(active)

    assert meeting.active_host_count >= 1
    assert all(a.guests_number <= meeting.guests_limit for a in meeting.active_attendees)


@given(
    ops=steps,
    attendees_limit=st.one_of(st.none(), st.integers(min_value=1, max_value=8)),
)
@settings(max_examples=150, deadline=None)
def test_invariants_hold_for_any_sequence(ops, attendees_limit):
    clock = SimClock(NOW)
    directory = make_directory()
    meeting = make_meeting(clock, attendees_limit=attendees_limit)
    meeting.clear_domain_events()

    for name, actor, target, guests, minutes in ops:
        clock.advance(minutes=minutes)
        before = meeting.snapshot()
        headcount = meeting.active_attendees_with_guests
        try:
            _OPS[name](meeting, directory, actor, target, guests)
        except RuleViolation:
            assert meeting.snapshot() == before
            assert meeting.domain_events == ()
            continue

        if attendees_limit is not None:
            assert meeting.active_attendees_with_guests <= attendees_limit
        if name in ("remove", "undecline", "unwait", "host", "demote", "pay"):
            assert meeting.active_attendees_with_guests <= headcount
        _assert_invariants(meeting)
        meeting.clear_domain_events()


@given(offset=st.integers(min_value=1, max_value=10_000))
@settings(max_examples=50)
def test_everything_rejected_after_start(offset):
    clock = SimClock(NOW)
    directory = make_directory()
    meeting = make_meeting(clock)
    clock.set_time(meeting.term.start + timedelta(seconds=offset))
    before = meeting.snapshot()

    for name, op in _OPS.items():
        if name == "pay":
            continue
        try:
            op(meeting, directory, CREATOR, CREATOR, 0)
        except RuleViolation as exc:
            assert exc.rule_name == "MeetingNotStartedRule"
        else:
            raise AssertionError(f"{name} accepted after start")

    assert meeting.snapshot() == before
