"""
Structured error types for spine-timer.

Construction-time problems (a period with no length, a calendar expression
croniter rejects, an unknown time zone) are caller misconfiguration. They are
surfaced immediately and synchronously, either returned inside ``Err`` by the
``Result``-returning constructors or raised by the exception-style entry
points. They are never retried.

Task failures are deliberately NOT part of this hierarchy: the scheduler
records them on the entry that failed and keeps every other entry running.

Manifesto:
    - **Typed Error Hierarchy:** One class per misconfiguration kind
    - **Fail at construction:** A bad period never reaches the scheduler
    - **Rich Context:** Errors carry the offending field and value
    - **Error Chaining:** croniter / zoneinfo errors are kept as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     SpineTimerError                          │
        │            (category, context, cause, to_dict)               │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  PeriodError          ScheduleError          ConfigError     │
        │  (VALIDATION)         (ORCHESTRATION)        (CONFIG)        │
        │       │                     │                     │          │
        │  ZeroDurationError    InvalidScheduleError   InvalidConfig   │
        │  NegativeDuration     SchedulerStoppedError  Error           │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> from datetime import timedelta
    >>> from spine_timer.core.period import Period
    >>> result = Period.starting_at(start, timedelta(0))
    >>> isinstance(result.error, ZeroDurationError)
    True
    >>> result.error.to_dict()["category"]
    'VALIDATION'

Tags:
    error-handling, exception-hierarchy, period, cron, spine-timer

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and log routing."""

    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    ORCHESTRATION = "ORCHESTRATION"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        entry: Name of the scheduled entry involved, if any
        source: Description of the temporal source (e.g. a cron expression)
        timezone: Zone the failing operation was evaluated in
        metadata: Additional key-value pairs
    """

    entry: str | None = None
    source: str | None = None
    timezone: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["entry", "source", "timezone"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class SpineTimerError(Exception):
    """
    Base exception for all spine-timer errors.

    Subclasses pick a ``default_category``; callers may override it, attach an
    ``ErrorContext`` and chain the underlying exception through ``cause``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SpineTimerError:
        """
        Add context to this error (fluent API).

        Usage:
            raise InvalidScheduleError("bad").with_context(source="* * *")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# PERIOD ERRORS
# =============================================================================


class PeriodError(SpineTimerError):
    """
    A period could not be constructed.

    Carries the rejected ``duration`` so log lines show what the caller asked
    for.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, duration: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.duration = duration

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.duration is not None:
            result["duration"] = repr(self.duration)
        return result


class ZeroDurationError(PeriodError):
    """The period duration is exactly zero."""

    def __init__(self, duration: Any = None):
        super().__init__("Period duration must not be zero", duration=duration)


class NegativeDurationError(PeriodError):
    """The period duration is negative."""

    def __init__(self, duration: Any = None):
        super().__init__(
            f"Period duration must be positive, got {duration!r}", duration=duration
        )


# =============================================================================
# SCHEDULE ERRORS
# =============================================================================


class ScheduleError(SpineTimerError):
    """Schedule configuration or scheduler lifecycle error."""

    default_category = ErrorCategory.ORCHESTRATION


class InvalidScheduleError(ScheduleError):
    """A calendar expression was rejected by the evaluator."""

    def __init__(self, expression: str, cause: Exception | None = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            f"Invalid calendar expression {expression!r}{detail}",
            context=ErrorContext(source=expression),
            cause=cause,
        )
        self.expression = expression


class SchedulerStoppedError(ScheduleError):
    """An entry was registered with a scheduler that has been stopped."""

    def __init__(self, message: str = "Scheduler has been stopped"):
        super().__init__(message)


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(SpineTimerError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(
        self,
        key: str,
        value: Any,
        message: str | None = None,
        cause: Exception | None = None,
    ):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid value for {key}: {value!r}", cause=cause)


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SpineTimerError",
    "PeriodError",
    "ZeroDurationError",
    "NegativeDurationError",
    "ScheduleError",
    "InvalidScheduleError",
    "SchedulerStoppedError",
    "ConfigError",
    "InvalidConfigError",
]
