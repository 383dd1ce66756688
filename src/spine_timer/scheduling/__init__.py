"""Scheduler package for spine-timer.

Manifesto:
    A timer that fires tasks needs more than ``time.sleep()`` in a loop.
    Each entry must wait on its own schedule, a slow task must not hold up
    anyone else's, and a running entry must be stoppable at the point where
    it waits. The scheduling package gives every (source, task) pair its
    own cancellable execution path.

┌──────────────────────────────────────────────────────────────────────────────┐
│  SPINE TIMER SCHEDULER                                                        │
│                                                                               │
│  Quick Start:                                                                 │
│  ┌──────────────────────────────────────────────────────────────────────┐   │
│  │   from datetime import timedelta                                     │   │
│  │   from spine_timer import CronSchedule, Period, Scheduler            │   │
│  │                                                                      │   │
│  │   scheduler = Scheduler()                                            │   │
│  │   scheduler.register(                                                │   │
│  │       Period.starting_now(timedelta(seconds=10)).unwrap(),           │   │
│  │       lambda: print("every ten seconds"),                            │   │
│  │   )                                                                  │   │
│  │   scheduler.register(                                                │   │
│  │       CronSchedule("0 30 9 * * Mon-Fri"),                            │   │
│  │       lambda: print("weekdays at 09:30"),                            │   │
│  │   )                                                                  │   │
│  │   scheduler.run()                                                    │   │
│  └──────────────────────────────────────────────────────────────────────┘   │
│                                                                               │
│  Dependencies:                                                                │
│  - croniter: calendar expression evaluation                                  │
│  - pydantic-settings: SPINE_TIMER_* configuration                            │
└──────────────────────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ Sleeping the whole process until the earliest due instant
    ✅ One daemon thread per entry, waiting on its own cancellation event
    ❌ Letting one failing task take down every timer
    ✅ Failure is recorded on the entry (state FAILED) and logged

Tags:
    spine-timer, scheduling, threads, cancellation, period, cron

Doc-Types:
    package-overview, architecture-map, module-index
"""

from __future__ import annotations

from .entry import ScheduledEntry
from .protocol import EntrySnapshot, EntryState, SchedulerStats
from .service import Scheduler

__all__ = [
    "Scheduler",
    "ScheduledEntry",
    "EntryState",
    "EntrySnapshot",
    "SchedulerStats",
]
