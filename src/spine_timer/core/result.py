"""
Result envelope for construction-time success/failure.

``Period.starting_at`` and ``CronSchedule.parse`` never raise for bad input;
they return ``Ok(value)`` or ``Err(error)``. The caller branches on the
outcome, or calls ``unwrap()`` and lets the typed error propagate.

Architecture:
    ::

        ┌───────────────────────────────────────────────┐
        │                  Result[T]                     │
        ├────────────────┬────────────────┬─────────────┤
        │    Ok[T]       │    Err[T]      │  Utilities  │
        ├────────────────┼────────────────┼─────────────┤
        │ • value: T     │ • error: Exc   │ try_result  │
        │ • unwrap()     │ • unwrap() ⚡  │             │
        └────────────────┴────────────────┴─────────────┘

Examples:
    >>> from datetime import timedelta
    >>> from spine_timer.core.period import Period
    >>> match Period.starting_at(start, timedelta(minutes=5)):
    ...     case Ok(period):
    ...         print(period.duration)
    ...     case Err(error):
    ...         print(f"Error: {error}")
    0:05:00

Tags:
    result-pattern, error-handling, spine-timer
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful construction holding the built value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Failed construction holding the error.

    ``unwrap()`` re-raises the stored error, which is how exception-style
    callers opt out of the Result pattern.
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the stored error."""
        raise self.error

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def try_result(f: Callable[[], T]) -> Result[T]:
    """
    Run a raising constructor and wrap its outcome.

    ``CronSchedule.parse`` uses this to turn ``InvalidScheduleError`` into
    ``Err``.

    Returns:
        Ok with the return value, or Err with the raised exception
    """
    try:
        return Ok(f())
    except Exception as e:
        return Err(e)


__all__ = [
    "Ok",
    "Err",
    "Result",
    "try_result",
]
