"""Shared fixtures for the meetings test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from meetings.core.clock import SimClock
from meetings.domain.meeting import Meeting
from meetings.infrastructure.membership import InMemoryGroupDirectory

from tests.factories import NOW, make_directory, make_meeting


@pytest.fixture
def clock() -> SimClock:
    return SimClock(NOW)


@pytest.fixture
def directory() -> InMemoryGroupDirectory:
    return make_directory()


@pytest.fixture
def meeting_factory(clock: SimClock) -> Callable[..., Meeting]:
    """Factory sharing the test's clock; drops the creation events."""

    def _factory(**overrides: Any) -> Meeting:
        meeting = make_meeting(clock, **overrides)
        meeting.clear_domain_events()
        return meeting

    return _factory


@pytest.fixture
def meeting(meeting_factory: Callable[..., Meeting]) -> Meeting:
    return meeting_factory()
