"""Pytest fixtures for scheduling tests.

Due instants are anchored in 2030 and computed with a clock frozen in 2020,
while the scheduler reads a clock frozen in 2031: every instant is already
due, so entries fire immediately without real sleeping.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta

import pytest

from spine_timer.core.clock import FixedClock
from spine_timer.core.period import Period
from spine_timer.core.settings import TimerSettings
from spine_timer.scheduling import Scheduler

START = datetime(2030, 1, 1, tzinfo=UTC)


@pytest.fixture
def settings() -> TimerSettings:
    return TimerSettings(timezone="UTC", join_timeout_seconds=2.0)


@pytest.fixture
def overdue_clock() -> FixedClock:
    """Scheduler clock for which every test instant lies in the past."""
    return FixedClock(datetime(2031, 1, 1, tzinfo=UTC))


@pytest.fixture
def period() -> Period:
    """Ten-second period starting 2030-01-01, aligned with a 2020 clock."""
    clock = FixedClock(datetime(2020, 1, 1, tzinfo=UTC))
    return Period.starting_at(START, timedelta(seconds=10), clock=clock).unwrap()


@pytest.fixture
def scheduler(overdue_clock, settings) -> Generator[Scheduler, None, None]:
    sched = Scheduler(overdue_clock, settings=settings)
    yield sched
    sched.stop()


def _wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def wait_for() -> Callable[..., bool]:
    """Polling helper: ``wait_for(predicate, timeout=5.0)``."""
    return _wait_for
