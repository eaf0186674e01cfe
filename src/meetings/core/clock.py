"""Clock abstraction for deterministic time.

WallClock: real wall-clock time (production)
SimClock: manually driven time (tests, local tooling)

Domain code never calls datetime.now() directly; every "now" comparison
and every timestamp stamped on a meeting goes through an ``IClock``.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class IClock(Protocol):
    """Clock interface used by all time-dependent code."""

    def now(self) -> datetime:
        """Current time as timezone-aware UTC datetime."""
        ...


class WallClock:
    """Real wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class SimClock:
    """Simulated clock for deterministic tests.

    Time only moves when explicitly set or advanced.
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._time = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._time

    def set_time(self, t: datetime) -> None:
        """Jump to *t*. Must not go backwards."""
        if t < self._time:
            raise ValueError(
                f"SimClock cannot go backwards: {t} < {self._time}"
            )
        self._time = t

    def advance(self, **kwargs: float) -> None:
        """Advance by a ``timedelta(**kwargs)``, e.g. ``advance(hours=2)``."""
        self.set_time(self._time + timedelta(**kwargs))
