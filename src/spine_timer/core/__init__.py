"""Temporal-iteration engine: clocks, periods, interval strategies and sources."""

from spine_timer.core.clock import Clock, FixedClock, ManualClock, SystemClock
from spine_timer.core.errors import (
    InvalidConfigError,
    InvalidScheduleError,
    NegativeDurationError,
    PeriodError,
    ScheduleError,
    SchedulerStoppedError,
    SpineTimerError,
    ZeroDurationError,
)
from spine_timer.core.period import IntervalStrategy, Period, PeriodSequence, PeriodSource
from spine_timer.core.result import Err, Ok, Result
from spine_timer.core.sources import Bounded, CronSchedule, Once, TemporalSource, merge_upcoming
from spine_timer.core.tasks import FunctionTask, PrintingTask, Task, as_task

__all__ = [
    # Clock
    "Clock",
    "SystemClock",
    "FixedClock",
    "ManualClock",
    # Period
    "Period",
    "PeriodSequence",
    "PeriodSource",
    "IntervalStrategy",
    # Sources
    "TemporalSource",
    "CronSchedule",
    "Once",
    "Bounded",
    "merge_upcoming",
    # Tasks
    "Task",
    "FunctionTask",
    "PrintingTask",
    "as_task",
    # Result
    "Ok",
    "Err",
    "Result",
    # Errors
    "SpineTimerError",
    "PeriodError",
    "ZeroDurationError",
    "NegativeDurationError",
    "ScheduleError",
    "InvalidScheduleError",
    "SchedulerStoppedError",
    "InvalidConfigError",
]
