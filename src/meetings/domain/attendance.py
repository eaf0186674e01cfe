"""Child entities owned by the Meeting aggregate.

``Attendee``, ``NotAttendee`` and ``WaitlistEntry`` are never persisted or
referenced on their own.  Their public surface is read-only; the
underscore-prefixed transition methods are called by ``Meeting`` only.
Records are never deleted, only transitioned, so the owning lists act as
an audit trail.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from meetings.core.enums import AttendeeRole, AttendeeStatus, WaitlistStatus

from .values import MoneyValue


class Attendee:
    """One attendance record of a member.

    State machine::

        ACTIVE -> REMOVED      (removed by host / organizer)
        ACTIVE -> SUPERSEDED   (member declined)

    Both targets are terminal for the record; a member becomes active
    again only through a brand-new record.
    """

    def __init__(
        self,
        meeting_id: str,
        member_id: str,
        signed_up_at: datetime,
        role: AttendeeRole,
        guests_number: int,
        fee: MoneyValue,
    ) -> None:
        self._meeting_id = meeting_id
        self._member_id = member_id
        self._signed_up_at = signed_up_at
        self._role = role
        self._guests_number = guests_number
        self._fee = fee
        self._status = AttendeeStatus.ACTIVE
        self._decision_changed_at: datetime | None = None
        self._removed_by: str | None = None
        self._removal_reason: str | None = None
        self._removed_at: datetime | None = None
        self._fee_paid = False
        self._fee_paid_at: datetime | None = None

    # -- Read side --------------------------------------------------------

    @property
    def meeting_id(self) -> str:
        return self._meeting_id

    @property
    def member_id(self) -> str:
        return self._member_id

    @property
    def signed_up_at(self) -> datetime:
        return self._signed_up_at

    @property
    def role(self) -> AttendeeRole:
        return self._role

    @property
    def guests_number(self) -> int:
        return self._guests_number

    @property
    def fee(self) -> MoneyValue:
        return self._fee

    @property
    def status(self) -> AttendeeStatus:
        return self._status

    @property
    def is_active(self) -> bool:
        return self._status is AttendeeStatus.ACTIVE

    @property
    def is_active_host(self) -> bool:
        return self.is_active and self._role is AttendeeRole.HOST

    @property
    def decision_changed_at(self) -> datetime | None:
        return self._decision_changed_at

    @property
    def removed_by(self) -> str | None:
        return self._removed_by

    @property
    def removal_reason(self) -> str | None:
        return self._removal_reason

    @property
    def removed_at(self) -> datetime | None:
        return self._removed_at

    @property
    def fee_paid(self) -> bool:
        return self._fee_paid

    @property
    def headcount(self) -> int:
        """The attendee plus their guests."""
        return 1 + self._guests_number

    def is_active_attendee(self, member_id: str) -> bool:
        return self.is_active and self._member_id == member_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "meeting_id": self._meeting_id,
            "member_id": self._member_id,
            "signed_up_at": self._signed_up_at,
            "role": self._role.value,
            "guests_number": self._guests_number,
            "fee": (self._fee.amount, self._fee.currency),
            "status": self._status.value,
            "decision_changed_at": self._decision_changed_at,
            "removed_by": self._removed_by,
            "removal_reason": self._removal_reason,
            "removed_at": self._removed_at,
            "fee_paid": self._fee_paid,
            "fee_paid_at": self._fee_paid_at,
        }

    def __repr__(self) -> str:
        return (
            f"Attendee(member_id={self._member_id!r}, role={self._role.value}, "
            f"guests={self._guests_number}, status={self._status.value})"
        )

    # -- Transitions (aggregate only) --------------------------------------

    def _set_as_host(self) -> None:
        self._role = AttendeeRole.HOST

    def _set_as_attendee(self) -> None:
        self._role = AttendeeRole.ATTENDEE

    def _change_decision(self, when: datetime) -> None:
        self._status = AttendeeStatus.SUPERSEDED
        self._decision_changed_at = when

    def _remove(self, removed_by: str, reason: str, when: datetime) -> None:
        self._status = AttendeeStatus.REMOVED
        self._removed_by = removed_by
        self._removal_reason = reason
        self._removed_at = when

    def _mark_fee_as_paid(self, when: datetime) -> None:
        self._fee_paid = True
        self._fee_paid_at = when


class NotAttendee:
    """A member's "I won't come" decision.  One row per member, toggled."""

    def __init__(self, meeting_id: str, member_id: str) -> None:
        self._meeting_id = meeting_id
        self._member_id = member_id
        self._is_active = True
        self._decision_changed_at: datetime | None = None

    @property
    def meeting_id(self) -> str:
        return self._meeting_id

    @property
    def member_id(self) -> str:
        return self._member_id

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def decision_changed_at(self) -> datetime | None:
        return self._decision_changed_at

    def is_active_not_attendee(self, member_id: str) -> bool:
        return self._is_active and self._member_id == member_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "meeting_id": self._meeting_id,
            "member_id": self._member_id,
            "is_active": self._is_active,
            "decision_changed_at": self._decision_changed_at,
        }

    def __repr__(self) -> str:
        return f"NotAttendee(member_id={self._member_id!r}, active={self._is_active})"

    def _change_decision(self, when: datetime) -> None:
        self._is_active = not self._is_active
        self._decision_changed_at = when


class WaitlistEntry:
    """A member queued for a slot.

    State machine::

        ACTIVE -> SIGNED_OFF
        ACTIVE -> PROMOTED
    """

    def __init__(self, meeting_id: str, member_id: str, signed_up_at: datetime) -> None:
        self._meeting_id = meeting_id
        self._member_id = member_id
        self._signed_up_at = signed_up_at
        self._status = WaitlistStatus.ACTIVE
        self._signed_off_at: datetime | None = None
        self._promoted_at: datetime | None = None

    @property
    def meeting_id(self) -> str:
        return self._meeting_id

    @property
    def member_id(self) -> str:
        return self._member_id

    @property
    def signed_up_at(self) -> datetime:
        return self._signed_up_at

    @property
    def status(self) -> WaitlistStatus:
        return self._status

    @property
    def is_active(self) -> bool:
        return self._status is WaitlistStatus.ACTIVE

    def is_active_on_waitlist(self, member_id: str) -> bool:
        return self.is_active and self._member_id == member_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "meeting_id": self._meeting_id,
            "member_id": self._member_id,
            "signed_up_at": self._signed_up_at,
            "status": self._status.value,
            "signed_off_at": self._signed_off_at,
            "promoted_at": self._promoted_at,
        }

    def __repr__(self) -> str:
        return f"WaitlistEntry(member_id={self._member_id!r}, status={self._status.value})"

    def _sign_off(self, when: datetime) -> None:
        self._status = WaitlistStatus.SIGNED_OFF
        self._signed_off_at = when

    def _mark_promoted(self, when: datetime) -> None:
        self._status = WaitlistStatus.PROMOTED
        self._promoted_at = when
