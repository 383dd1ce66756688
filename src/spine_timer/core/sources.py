"""
Temporal sources — anything that produces ordered due instants.

The scheduler only knows one capability: ``iter_times(tz)`` returns a lazy
iterator of aware datetimes, ascending, rendered in ``tz``. Recurring
periods and calendar expressions both provide it, so the scheduler never
branches on the kind of schedule it was given.

┌──────────────────────────────────────────────────────────────────────────────┐
│  TEMPORAL SOURCES                                                            │
│                                                                              │
│   ┌──────────────────┐                                                       │
│   │  TemporalSource  │   iter_times(tz) -> Iterator[datetime]                │
│   │  (Protocol)      │                                                       │
│   └────────┬─────────┘                                                       │
│            │                                                                 │
│   ┌────────┴─────────┬──────────────────┬──────────────────┐                 │
│   ▼                  ▼                  ▼                  ▼                 │
│  Period          CronSchedule          Once             Bounded              │
│  (catch-up,      (croniter, finite     (single          (count / until       │
│   unbounded)      past year 2099)       instant)         over any source)    │
│                                                                              │
│  Calendar expressions: 5, 6 or 7 fields, seconds first when present:         │
│     second minute hour day-of-month month day-of-week [year]                 │
│  Lists (1,15), ranges (9-17), steps (*/5, 2018/2) and names (May, Mon-Fri).  │
└──────────────────────────────────────────────────────────────────────────────┘

Tags:
    spine-timer, scheduling, cron, croniter, protocol, temporal-source

Doc-Types:
    api-reference, architecture-diagram
"""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime, tzinfo
from typing import Protocol, runtime_checkable

from croniter import CroniterError, croniter

from spine_timer.core.clock import Clock, SystemClock, ensure_aware
from spine_timer.core.errors import InvalidScheduleError
from spine_timer.core.result import Result, try_result

# croniter gives up after this many years without a match unless told otherwise
DEFAULT_MAX_YEARS_BETWEEN_MATCHES = 100


@runtime_checkable
class TemporalSource(Protocol):
    """Protocol for producers of due instants.

    Implementations:
        - Period: recurring fixed-duration interval (catch-up aligned)
        - CronSchedule: calendar expression evaluated by croniter
        - Once: a single instant
        - Bounded: a finite horizon over another source
    """

    def iter_times(self, tz: tzinfo) -> Iterator[datetime]:
        """Return a lazy, ascending iterator of due instants rendered in ``tz``."""
        ...


class CronSchedule:
    """
    Calendar-expression source backed by croniter.

    The expression is validated at construction; matches are computed
    lazily from the clock's reading at the moment ``iter_times`` is called.

    Example:
        >>> schedule = CronSchedule("0 30 9,12,15 1,15 May-Aug Mon,Wed,Fri")
        >>> next(schedule.iter_times(ZoneInfo("Europe/Berlin")))
    """

    def __init__(
        self,
        expression: str,
        *,
        clock: Clock | None = None,
        max_years_between_matches: int = DEFAULT_MAX_YEARS_BETWEEN_MATCHES,
    ) -> None:
        """Initialize a calendar schedule.

        Args:
            expression: Cron expression (seconds first for 6/7 fields)
            clock: Clock giving the instant matches are searched from
            max_years_between_matches: Search horizon handed to croniter

        Raises:
            InvalidScheduleError: croniter rejected the expression
        """
        self.expression = " ".join(expression.split())
        try:
            croniter.expand(self.expression, second_at_beginning=True)
        except (CroniterError, ValueError, TypeError) as e:
            raise InvalidScheduleError(expression, cause=e) from e
        self.clock = clock or SystemClock()
        self.max_years_between_matches = max_years_between_matches

    @classmethod
    def parse(
        cls,
        expression: str,
        *,
        clock: Clock | None = None,
        max_years_between_matches: int = DEFAULT_MAX_YEARS_BETWEEN_MATCHES,
    ) -> Result[CronSchedule]:
        """Result-returning constructor: ``Err(InvalidScheduleError)`` on a bad expression."""
        return try_result(
            lambda: cls(
                expression,
                clock=clock,
                max_years_between_matches=max_years_between_matches,
            )
        )

    def iter_times(self, tz: tzinfo) -> Iterator[datetime]:
        cron = croniter(
            self.expression,
            self.clock.now(tz),
            ret_type=datetime,
            second_at_beginning=True,
            max_years_between_matches=self.max_years_between_matches,
        )
        # all_next stops quietly once the expression can no longer match
        return cron.all_next(datetime)

    def describe(self) -> str:
        return f"cron '{self.expression}'"

    def __repr__(self) -> str:
        return f"CronSchedule({self.expression!r})"


class Once:
    """Source with exactly one due instant."""

    def __init__(self, at: datetime, timezone: tzinfo = UTC) -> None:
        self.at = ensure_aware(at, timezone)

    def iter_times(self, tz: tzinfo) -> Iterator[datetime]:
        return iter([self.at.astimezone(tz)])

    def describe(self) -> str:
        return f"once at {self.at.isoformat()}"

    def __repr__(self) -> str:
        return f"Once({self.at.isoformat()})"


class Bounded:
    """
    Finite horizon over another source.

    Stops after ``count`` instants, or before the first instant later than
    ``until``, whichever comes first.
    """

    def __init__(
        self,
        source: TemporalSource,
        *,
        count: int | None = None,
        until: datetime | None = None,
    ) -> None:
        if count is not None and count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        self.source = source
        self.count = count
        self.until = ensure_aware(until, UTC) if until is not None else None

    def iter_times(self, tz: tzinfo) -> Iterator[datetime]:
        times = self.source.iter_times(tz)
        if self.count is not None:
            times = itertools.islice(times, self.count)
        if self.until is not None:
            limit = self.until.timestamp()
            times = itertools.takewhile(lambda t: t.timestamp() <= limit, times)
        return times

    def describe(self) -> str:
        parts = [describe_source(self.source)]
        if self.count is not None:
            parts.append(f"{self.count} times")
        if self.until is not None:
            parts.append(f"until {self.until.isoformat()}")
        return ", ".join(parts)

    def __repr__(self) -> str:
        return f"Bounded({self.source!r}, count={self.count}, until={self.until})"


def describe_source(source: TemporalSource) -> str:
    """Human-readable label for a source, used in logs and CLI output."""
    describe = getattr(source, "describe", None)
    if callable(describe):
        return describe()
    return repr(source)


def merge_upcoming(
    sources: Iterable[TemporalSource],
    tz: tzinfo,
    limit: int,
) -> list[tuple[int, datetime]]:
    """
    Ordered union of the next instants of several sources.

    Args:
        sources: Sources to merge
        tz: Zone to render instants in
        limit: Maximum number of instants to return

    Returns:
        ``(source_index, instant)`` pairs in ascending real-time order
    """

    def tagged(index: int, source: TemporalSource) -> Iterator[tuple[int, datetime]]:
        for instant in source.iter_times(tz):
            yield index, instant

    streams = [tagged(index, source) for index, source in enumerate(sources)]
    merged = heapq.merge(*streams, key=lambda pair: pair[1].timestamp())
    return list(itertools.islice(merged, limit))


__all__ = [
    "TemporalSource",
    "CronSchedule",
    "Once",
    "Bounded",
    "describe_source",
    "merge_upcoming",
    "DEFAULT_MAX_YEARS_BETWEEN_MATCHES",
]
