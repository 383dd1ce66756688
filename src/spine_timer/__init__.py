"""
spine-timer — fire tasks on recurring periods or calendar expressions.

A single-process, in-memory timer: build a ``Period`` (fixed duration,
DST-safe) or a ``CronSchedule`` (croniter), register it with a ``Scheduler``
together with a task, and every entry runs on its own cancellable thread.
"""

from spine_timer.core import *  # noqa: F403
from spine_timer.core import __all__ as _core_all
from spine_timer.scheduling import (
    EntrySnapshot,
    EntryState,
    ScheduledEntry,
    Scheduler,
    SchedulerStats,
)

__version__ = "0.1.0"

__all__ = [
    *_core_all,
    "Scheduler",
    "ScheduledEntry",
    "EntryState",
    "EntrySnapshot",
    "SchedulerStats",
    "__version__",
]
