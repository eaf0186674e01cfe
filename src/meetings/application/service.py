"""Application service driving the Meeting aggregate.

Each call is one unit of work::

    load -> invoke one aggregate operation -> save -> drain events

Events are appended to the event store strictly after ``save``.  If the
operation raises, nothing is saved and the buffered events of the failed
call never existed (rules run before any mutation).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from decimal import Decimal

from meetings.core.clock import IClock, WallClock
from meetings.core.config import Settings
from meetings.core.errors import RuleViolation
from meetings.core.ids import new_id
from meetings.core.interfaces import IGroupMembership, IMeetingRepository
from meetings.domain.meeting import Meeting
from meetings.domain.rules import HostsAreGroupMembersRule, check_rules
from meetings.domain.values import Location, MeetingTerm, MoneyValue, Term
from meetings.infrastructure.event_store import IEventStore
from meetings.observability.logger import get_logger, new_operation_id

log = get_logger(__name__)


class MeetingService:
    """Use-case entry points for meetings.

    Args:
        repository: Where aggregates are loaded from and saved to.
        membership: Group membership oracle consumed by the rules.
        event_store: Receives drained domain events after each save.
        clock: Injected into newly created meetings.
        settings: Supplies defaults for omitted creation parameters.
    """

    def __init__(
        self,
        repository: IMeetingRepository,
        membership: IGroupMembership,
        event_store: IEventStore,
        *,
        clock: IClock | None = None,
        settings: Settings | None = None,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._repository = repository
        self._membership = membership
        self._event_store = event_store
        self._clock = clock or WallClock()
        self._settings = settings or Settings()
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_meeting(
        self,
        group_id: str,
        title: str,
        term: MeetingTerm,
        creator_id: str,
        *,
        description: str = "",
        location: Location | None = None,
        attendees_limit: int | None = None,
        guests_limit: int | None = None,
        rsvp_term: Term | None = None,
        event_fee: Decimal | MoneyValue | None = None,
        host_ids: Sequence[str] = (),
    ) -> Meeting:
        """Create and store a meeting; hosts must belong to the group."""
        new_operation_id()
        defaults = self._settings.defaults

        hosts = list(host_ids) or [creator_id]
        try:
            check_rules(HostsAreGroupMembersRule(self._membership, group_id, hosts))
        except RuleViolation as exc:
            log.info("meeting_rejected", op="create_meeting", rule=exc.rule_name)
            raise

        if event_fee is None:
            fee = MoneyValue.ZERO
        elif isinstance(event_fee, MoneyValue):
            fee = event_fee
        else:
            fee = MoneyValue(event_fee, defaults.currency)

        meeting = Meeting.create(
            group_id=group_id,
            title=title,
            term=term,
            description=description,
            location=location or Location(),
            attendees_limit=attendees_limit,
            guests_limit=defaults.guests_limit if guests_limit is None else guests_limit,
            rsvp_term=rsvp_term or Term(),
            event_fee=fee,
            host_ids=list(host_ids),
            creator_id=creator_id,
            clock=self._clock,
            id_factory=self._id_factory,
        )
        await self._repository.add(meeting)
        await self._publish(meeting)
        log.info("meeting_created", meeting_id=meeting.id, group_id=group_id)
        return meeting

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def change_main_attributes(
        self,
        meeting_id: str,
        modify_member_id: str,
        *,
        title: str,
        term: MeetingTerm,
        description: str,
        location: Location,
        attendees_limit: int | None,
        guests_limit: int,
        rsvp_term: Term,
        event_fee: MoneyValue,
    ) -> None:
        await self._execute(
            meeting_id,
            "change_main_attributes",
            lambda m: m.change_main_attributes(
                title, term, description, location, attendees_limit,
                guests_limit, rsvp_term, event_fee, modify_member_id,
            ),
        )

    async def add_attendee(self, meeting_id: str, member_id: str, guests_number: int = 0) -> None:
        await self._execute(
            meeting_id,
            "add_attendee",
            lambda m: m.add_attendee(self._membership, member_id, guests_number),
        )

    async def add_not_attendee(self, meeting_id: str, member_id: str) -> None:
        await self._execute(
            meeting_id, "add_not_attendee", lambda m: m.add_not_attendee(member_id),
        )

    async def change_not_attendee_decision(self, meeting_id: str, member_id: str) -> None:
        await self._execute(
            meeting_id,
            "change_not_attendee_decision",
            lambda m: m.change_not_attendee_decision(member_id),
        )

    async def sign_up_member_to_waitlist(self, meeting_id: str, member_id: str) -> None:
        await self._execute(
            meeting_id,
            "sign_up_member_to_waitlist",
            lambda m: m.sign_up_member_to_waitlist(self._membership, member_id),
        )

    async def sign_off_member_from_waitlist(self, meeting_id: str, member_id: str) -> None:
        await self._execute(
            meeting_id,
            "sign_off_member_from_waitlist",
            lambda m: m.sign_off_member_from_waitlist(member_id),
        )

    async def set_host_role(
        self, meeting_id: str, setting_member_id: str, member_id: str,
    ) -> None:
        await self._execute(
            meeting_id,
            "set_host_role",
            lambda m: m.set_host_role(self._membership, setting_member_id, member_id),
        )

    async def set_attendee_role(
        self, meeting_id: str, setting_member_id: str, member_id: str,
    ) -> None:
        await self._execute(
            meeting_id,
            "set_attendee_role",
            lambda m: m.set_attendee_role(self._membership, setting_member_id, member_id),
        )

    async def cancel(self, meeting_id: str, cancel_member_id: str) -> None:
        await self._execute(meeting_id, "cancel", lambda m: m.cancel(cancel_member_id))

    async def remove_attendee(
        self, meeting_id: str, member_id: str, removing_member_id: str, reason: str,
    ) -> None:
        await self._execute(
            meeting_id,
            "remove_attendee",
            lambda m: m.remove_attendee(member_id, removing_member_id, reason),
        )

    async def mark_attendee_fee_as_paid(self, meeting_id: str, member_id: str) -> None:
        await self._execute(
            meeting_id,
            "mark_attendee_fee_as_paid",
            lambda m: m.mark_attendee_fee_as_paid(member_id),
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _execute(
        self,
        meeting_id: str,
        op: str,
        action: Callable[[Meeting], None],
    ) -> None:
        new_operation_id()
        meeting = await self._repository.get(meeting_id)
        try:
            action(meeting)
        except RuleViolation as exc:
            log.info("meeting_rejected", op=op, meeting_id=meeting_id, rule=exc.rule_name)
            raise
        await self._repository.save(meeting)
        published = await self._publish(meeting)
        log.info("meeting_updated", op=op, meeting_id=meeting_id, events=published)

    async def _publish(self, meeting: Meeting) -> int:
        events = meeting.pull_domain_events()
        for event in events:
            await self._event_store.append(event)
        return len(events)
