"""
Period — a repeatable interval anchored at a start instant.

A ``Period`` is an immutable value: a start instant, a strictly positive
duration, the zone its instants are rendered in, and the clock used for
catch-up alignment. Iterating it never mutates it; every accessor returns a
fresh ``PeriodSequence`` cursor, so the same period can be replayed any number
of times.

Manifesto:
    Elapsed time, not wall-clock labels. Adding one hour to 01:00 on the night
    clocks spring forward must land on 03:00, and adding one hour to the first
    02:00 on the night clocks fall back must land on the *second* 02:00. The
    period does its arithmetic in UTC and only renders into the target zone,
    so the real duration between two consecutive instants is always exactly
    ``duration``.

    - **Validated at construction:** zero and negative durations never exist
    - **Reusable:** a period hands out independent cursors
    - **Two strategies:** FIXED replays from ``start``; CATCH_UP_ONCE aligns
      the first instant to the future once, then ticks deterministically

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │  Period(start, duration, timezone, clock)                    │
        │                                                              │
        │   upcoming_fixed()         ──► PeriodSequence(FIXED)         │
        │   upcoming_catch_up()      ──► PeriodSequence(CATCH_UP_ONCE) │
        │   upcoming_*_owned()       ──► same, over a detached copy    │
        │   iter_times(tz)           ──► catch-up sequence in tz       │
        │                                                              │
        │  PeriodSequence.__next__:                                    │
        │     value   = current                                        │
        │     current = (current in UTC + duration) rendered in tz     │
        └─────────────────────────────────────────────────────────────┘

        CATCH_UP_ONCE first value (clock reading = now):

            now == start         →  start + duration
            start  > now         →  start
            otherwise            →  start + k·duration,  smallest k with
                                    start + k·duration > now

Examples:
    >>> from zoneinfo import ZoneInfo
    >>> berlin = ZoneInfo("Europe/Berlin")
    >>> period = Period.starting_at(
    ...     datetime(2025, 3, 30, 1, 0, tzinfo=berlin), timedelta(hours=1)
    ... ).unwrap()
    >>> [t.hour for t in itertools.islice(period.upcoming_fixed(), 3)]
    [1, 3, 4]

Tags:
    period, interval, dst, catch-up, iterator, value-object, spine-timer

Doc-Types:
    - API Reference
    - Temporal Patterns Guide
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta, tzinfo
from enum import Enum

from spine_timer.core.clock import Clock, SystemClock, ensure_aware
from spine_timer.core.errors import NegativeDurationError, PeriodError, ZeroDurationError
from spine_timer.core.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class IntervalStrategy(str, Enum):
    """Policy used to compute due instants from a period."""

    FIXED = "fixed"
    CATCH_UP_ONCE = "catch-up"


def as_timedelta(duration: timedelta | int | float) -> timedelta:
    """Normalise a duration given as a ``timedelta`` or a number of seconds."""
    if isinstance(duration, timedelta):
        return duration
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        raise TypeError(f"duration must be a timedelta or seconds, got {type(duration).__name__}")
    return timedelta(seconds=duration)


def check_duration(duration: timedelta) -> PeriodError | None:
    """Return the construction error for ``duration``, or None if it is valid."""
    if duration == timedelta(0):
        return ZeroDurationError(duration)
    if duration < timedelta(0):
        return NegativeDurationError(duration)
    return None


def shift(instant: datetime, delta: timedelta, tz: tzinfo) -> datetime:
    """Add ``delta`` of elapsed time to ``instant`` and render the result in ``tz``."""
    return (instant.astimezone(UTC) + delta).astimezone(tz)


def next_available_timestamp(
    start: datetime,
    duration: timedelta,
    clock: Clock,
    tz: tzinfo,
) -> datetime:
    """
    First due instant of a catch-up sequence.

    Args:
        start: Anchor instant of the period
        duration: Period length (strictly positive)
        clock: Clock supplying "now"
        tz: Zone to render the result in

    Returns:
        ``start`` if it lies in the future, otherwise the smallest
        ``start + k·duration`` strictly later than now (``start + duration``
        when now equals start exactly).
    """
    now = clock.now(tz)
    elapsed = now.astimezone(UTC) - start.astimezone(UTC)

    if elapsed == timedelta(0):
        result = shift(start, duration, tz)
    elif elapsed < timedelta(0):
        result = start
    else:
        result = shift(start, duration * (elapsed // duration + 1), tz)

    logger.debug(
        "Catch-up alignment: start=%s duration=%s now=%s -> %s",
        start.isoformat(),
        duration,
        now.isoformat(),
        result.isoformat(),
    )
    return result


@dataclass(frozen=True, slots=True)
class Period:
    """
    Immutable recurring interval.

    Build one with ``Period.starting_at`` (returns a ``Result``) or
    ``Period.starting_now``; direct construction validates the same invariant
    and raises the matching ``PeriodError``.

    Attributes:
        start: Aware anchor instant
        duration: Strictly positive length of one interval
        timezone: Zone the sequence renders its instants in
        clock: Clock used for catch-up alignment
    """

    start: datetime
    duration: timedelta
    timezone: tzinfo = UTC
    clock: Clock = field(default_factory=SystemClock, compare=False, repr=False)

    def __post_init__(self) -> None:
        error = check_duration(self.duration)
        if error is not None:
            raise error
        if self.start.tzinfo is None:
            object.__setattr__(self, "start", self.start.replace(tzinfo=self.timezone))

    @classmethod
    def starting_at(
        cls,
        start: datetime,
        duration: timedelta | int | float,
        timezone: tzinfo | None = None,
        *,
        clock: Clock | None = None,
    ) -> Result[Period]:
        """
        Create a period anchored at ``start``.

        Args:
            start: Anchor instant. Naive values are read in ``timezone``
                (UTC when no zone is given).
            duration: Interval length as a ``timedelta`` or seconds
            timezone: Zone to render instants in; defaults to the start's zone
            clock: Clock for catch-up alignment; defaults to ``SystemClock()``

        Returns:
            Ok(Period), or Err(ZeroDurationError | NegativeDurationError)
        """
        delta = as_timedelta(duration)
        error = check_duration(delta)
        if error is not None:
            return Err(error)

        tz = timezone or start.tzinfo or UTC
        if start.tzinfo is None:
            start = ensure_aware(start, tz)
        elif timezone is not None and start.tzinfo is not timezone:
            start = start.astimezone(timezone)

        return Ok(cls(start=start, duration=delta, timezone=tz, clock=clock or SystemClock()))

    @classmethod
    def starting_now(
        cls,
        duration: timedelta | int | float,
        timezone: tzinfo | None = None,
        *,
        clock: Clock | None = None,
    ) -> Result[Period]:
        """Create a period anchored at the clock's current reading."""
        clock = clock or SystemClock()
        return cls.starting_at(clock.now(timezone or UTC), duration, timezone, clock=clock)

    # === Sequence accessors ===

    def upcoming(
        self,
        strategy: IntervalStrategy | str = IntervalStrategy.CATCH_UP_ONCE,
        tz: tzinfo | None = None,
    ) -> PeriodSequence:
        """Sequence of due instants under ``strategy``, borrowing this period."""
        return PeriodSequence(self, IntervalStrategy(strategy), tz)

    def upcoming_fixed(self, tz: tzinfo | None = None) -> PeriodSequence:
        """Instants from ``start`` onwards; may lie in the past."""
        return PeriodSequence(self, IntervalStrategy.FIXED, tz)

    def upcoming_catch_up(self, tz: tzinfo | None = None) -> PeriodSequence:
        """Instants strictly after the clock's reading at creation time."""
        return PeriodSequence(self, IntervalStrategy.CATCH_UP_ONCE, tz)

    def upcoming_fixed_owned(self, tz: tzinfo | None = None) -> PeriodSequence:
        """Single-use fixed sequence over a detached copy of this period."""
        return PeriodSequence(replace(self), IntervalStrategy.FIXED, tz)

    def upcoming_catch_up_owned(self, tz: tzinfo | None = None) -> PeriodSequence:
        """Single-use catch-up sequence over a detached copy of this period."""
        return PeriodSequence(replace(self), IntervalStrategy.CATCH_UP_ONCE, tz)

    def iter_times(self, tz: tzinfo) -> Iterator[datetime]:
        """Temporal source protocol: catch-up instants rendered in ``tz``."""
        return self.upcoming_catch_up_owned(tz)

    def as_source(
        self, strategy: IntervalStrategy | str = IntervalStrategy.CATCH_UP_ONCE
    ) -> PeriodSource:
        """Temporal source over this period using ``strategy`` (FIXED replays from start)."""
        return PeriodSource(self, IntervalStrategy(strategy))

    def describe(self) -> str:
        return f"every {self.duration} from {self.start.isoformat()}"


class PeriodSequence(Iterator[datetime]):
    """
    Lazy cursor over a period's due instants.

    The first value is computed once at construction (``start`` for FIXED, the
    catch-up alignment for CATCH_UP_ONCE); every later value is the previous
    one plus ``duration`` of elapsed time. The sequence only ends once the
    next instant falls outside the range ``datetime`` can represent.
    """

    def __init__(
        self,
        period: Period,
        strategy: IntervalStrategy,
        tz: tzinfo | None = None,
    ) -> None:
        self.period = period
        self.strategy = strategy
        self.timezone = tz or period.timezone

        # None once the next instant is out of datetime's range
        self.current: datetime | None
        try:
            if strategy is IntervalStrategy.FIXED:
                first = period.start
            else:
                first = next_available_timestamp(
                    period.start, period.duration, period.clock, self.timezone
                )
            if first.tzinfo is not self.timezone:
                first = first.astimezone(self.timezone)
        except OverflowError:
            logger.debug("Period %s has no representable instant", period.describe())
            first = None
        self.current = first

    def __iter__(self) -> PeriodSequence:
        return self

    def __next__(self) -> datetime:
        current = self.current
        if current is None:
            raise StopIteration
        try:
            self.current = shift(current, self.period.duration, self.timezone)
        except OverflowError:
            logger.debug("Period sequence ends after %s", current.isoformat())
            self.current = None
        return current

    def __repr__(self) -> str:
        current = self.current.isoformat() if self.current is not None else None
        return (
            f"PeriodSequence(strategy={self.strategy.value}, "
            f"current={current}, duration={self.period.duration})"
        )


@dataclass(frozen=True, slots=True)
class PeriodSource:
    """A period paired with the strategy the scheduler should follow.

    ``Period`` itself always schedules with CATCH_UP_ONCE; wrap it here with
    FIXED to backfill every instant since ``start``. Past instants are due
    immediately.
    """

    period: Period
    strategy: IntervalStrategy = IntervalStrategy.CATCH_UP_ONCE

    def iter_times(self, tz: tzinfo) -> Iterator[datetime]:
        return PeriodSequence(replace(self.period), self.strategy, tz)

    def describe(self) -> str:
        return f"{self.period.describe()} ({self.strategy.value})"


__all__ = [
    "IntervalStrategy",
    "Period",
    "PeriodSequence",
    "PeriodSource",
    "as_timedelta",
    "check_duration",
    "next_available_timestamp",
    "shift",
]
