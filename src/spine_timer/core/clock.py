"""
Clock abstractions for deterministic time-dependent logic.

Nothing in spine-timer reads the wall clock directly. Periods and the
scheduler receive a ``Clock`` at construction (defaulting to
``SystemClock``), so catch-up alignment and delay computation can be pinned
to a fixed or programmable instant in tests.

Every clock returns timezone-aware datetimes rendered in the zone the caller
asks for; the instant is the same whatever the rendering.

Examples:
    >>> from zoneinfo import ZoneInfo
    >>> clock = FixedClock(datetime(2020, 2, 1, tzinfo=UTC))
    >>> clock.now(ZoneInfo("Europe/Berlin")).hour
    1

Tags:
    clock, time, testing, dependency-injection, spine-timer

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta, tzinfo
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of the current instant.  Inject a fake in tests."""

    def now(self, tz: tzinfo | None = None) -> datetime:
        """Return the current time as an aware datetime rendered in ``tz`` (UTC if omitted)."""
        ...


class SystemClock:
    """Default clock backed by the real system time."""

    def now(self, tz: tzinfo | None = None) -> datetime:
        return datetime.now(tz or UTC)

    def __repr__(self) -> str:
        return "SystemClock()"


@dataclass(frozen=True, slots=True)
class FixedClock:
    """Clock that always returns the same instant (naive values are read as UTC)."""

    fixed_time: datetime

    def now(self, tz: tzinfo | None = None) -> datetime:
        return ensure_aware(self.fixed_time, UTC).astimezone(tz or UTC)


class ManualClock:
    """
    Programmable clock for tests.

    Starts at ``start`` and only moves when told to. Reads and writes are
    guarded by a lock because scheduler threads query the clock while the
    test thread advances it.

    Example:
        >>> clock = ManualClock(datetime(2020, 1, 1, tzinfo=UTC))
        >>> clock.advance(timedelta(minutes=7))
        >>> clock.now().minute
        7
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._current = ensure_aware(start, UTC) if start else datetime.now(UTC)
        self._lock = threading.Lock()

    def now(self, tz: tzinfo | None = None) -> datetime:
        with self._lock:
            current = self._current
        return current.astimezone(tz or UTC)

    def set(self, instant: datetime) -> None:
        """Jump to ``instant``."""
        with self._lock:
            self._current = ensure_aware(instant, UTC)

    def advance(self, delta: timedelta) -> None:
        """Move the clock by ``delta`` of elapsed time."""
        with self._lock:
            self._current = self._current + delta

    def __repr__(self) -> str:
        return f"ManualClock({self._current.isoformat()})"


def ensure_aware(value: datetime, tz: tzinfo) -> datetime:
    """Attach ``tz`` to a naive datetime; aware datetimes pass through unchanged."""
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=tz)
    return value


def seconds_until(due: datetime, now: datetime) -> float:
    """
    Real seconds from ``now`` until ``due``, never negative.

    Computed on POSIX timestamps: subtracting two datetimes that share a
    ``ZoneInfo`` compares wall-clock labels and is wrong across DST changes.
    """
    return max(0.0, due.timestamp() - now.timestamp())


__all__ = [
    "Clock",
    "SystemClock",
    "FixedClock",
    "ManualClock",
    "ensure_aware",
    "seconds_until",
]
