"""Domain layer: the Meeting aggregate, its child entities, rules and events.

Everything outside this package changes meeting state only through
``Meeting`` operations.
"""

from .meeting import Meeting
from .values import Location, MeetingTerm, MoneyValue, Term

__all__ = ["Location", "Meeting", "MeetingTerm", "MoneyValue", "Term"]
