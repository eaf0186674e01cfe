"""Immutable value objects for the meeting aggregate.

All value objects are frozen dataclasses compared by value.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import ClassVar


@dataclass(frozen=True)
class Term:
    """Generic, optionally open-ended date range (used for RSVP windows).

    A missing bound is unbounded on that side; both bounds are inclusive.
    """

    start: datetime | None = None
    end: datetime | None = None

    def contains(self, when: datetime) -> bool:
        after_start = self.start is None or self.start <= when
        before_end = self.end is None or self.end >= when
        return after_start and before_end


@dataclass(frozen=True)
class MeetingTerm:
    """When the meeting takes place."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(
                f"Meeting cannot end before it starts: {self.end} < {self.start}"
            )

    def is_after_start(self, now: datetime) -> bool:
        return now > self.start


@dataclass(frozen=True)
class Location:
    name: str = ""
    address: str = ""
    postal_code: str = ""
    city: str = ""


@dataclass(frozen=True)
class MoneyValue:
    """Amount + currency.  Arithmetic is deliberately not provided."""

    ZERO: ClassVar[MoneyValue]

    amount: Decimal = Decimal("0")
    currency: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))


MoneyValue.ZERO = MoneyValue(Decimal("0"), "")


def effective_rsvp_term(rsvp_term: Term, meeting_term: MeetingTerm) -> Term:
    """Clamp the RSVP window so it never closes after the meeting starts."""
    if rsvp_term.end is None or rsvp_term.end > meeting_term.start:
        return Term(start=rsvp_term.start, end=meeting_term.start)
    return rsvp_term
