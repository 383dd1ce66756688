"""Scheduler service — owns scheduled entries and drives them.

Manifesto:
    Every registered (source, task) pair gets its own independent execution
    path. A slow task, a blocked task or a task that raises affects only its
    own entry; every other timer keeps firing on time. The scheduler itself
    holds no per-entry timing state: it appends entries, waits for them, and
    cancels them.

Tags:
    spine-timer, scheduling, threads, cancellation, service

Doc-Types:
    api-reference, architecture-diagram


┌──────────────────────────────────────────────────────────────────────────────┐
│  SCHEDULER ARCHITECTURE                                                       │
│                                                                               │
│  ┌────────────────────────────────────────────────────────────────────┐      │
│  │                         Scheduler                                  │      │
│  │                                                                    │      │
│  │   register(source, task) ──► ScheduledEntry ──► daemon thread      │      │
│  │                               (append-only list, under _lock)      │      │
│  │                                                                    │      │
│  │   ┌──────────────┐  ┌──────────────┐  ┌──────────────┐            │      │
│  │   │ Entry 1      │  │ Entry 2      │  │ Entry N      │            │      │
│  │   │ Period/10s   │  │ cron 0 8 * * │  │ Once(...)    │            │      │
│  │   │ wait ► run   │  │ wait ► run   │  │ wait ► run   │            │      │
│  │   └──────────────┘  └──────────────┘  └──────────────┘            │      │
│  │          ▲                  ▲                  ▲                   │      │
│  │          └──────── shared read-only Clock ─────┘                   │      │
│  │                                                                    │      │
│  │   Public API:                                                      │      │
│  │   ├── register()    Add an entry and start its thread              │      │
│  │   ├── run()         Block until entries finish / stop / timeout    │      │
│  │   ├── cancel(id)    Stop one entry at its suspension point         │      │
│  │   ├── stop()        Cancel every entry and join the threads        │      │
│  │   └── health()      Entry counts by state + stats                  │      │
│  └────────────────────────────────────────────────────────────────────┘      │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from collections import Counter
from collections.abc import Callable
from datetime import tzinfo
from typing import Any

from spine_timer.core.clock import Clock, SystemClock
from spine_timer.core.errors import SchedulerStoppedError
from spine_timer.core.settings import TimerSettings, get_settings
from spine_timer.core.sources import TemporalSource, describe_source
from spine_timer.core.tasks import Task, as_task

from .entry import ScheduledEntry
from .protocol import EntrySnapshot, EntryState, SchedulerStats

logger = logging.getLogger(__name__)


class Scheduler:
    """In-memory scheduler: one daemon thread per registered entry.

    Example:
        >>> from datetime import timedelta
        >>> from spine_timer import Period, PrintingTask, Scheduler
        >>>
        >>> scheduler = Scheduler()
        >>> period = Period.starting_now(timedelta(seconds=10)).unwrap()
        >>> scheduler.register(period, PrintingTask("tick"), name="ticker")
        >>> scheduler.run(timeout=35)
        >>> scheduler.stop()
    """

    def __init__(
        self,
        clock: Clock | None = None,
        *,
        timezone: tzinfo | None = None,
        settings: TimerSettings | None = None,
    ) -> None:
        """Initialize scheduler.

        Args:
            clock: Clock used to turn due instants into delays
            timezone: Zone sources render instants in (default from settings)
            settings: Settings override (default: ``get_settings()``)
        """
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock()
        self.timezone = timezone or self.settings.tzinfo()

        self._entries: list[ScheduledEntry] = []
        self._lock = threading.Lock()
        self._changed = threading.Condition(self._lock)
        self._ids = itertools.count(1)
        self._stopped = False

    # === Registration ===

    def register(
        self,
        source: TemporalSource,
        task: Task | Callable[[], Any],
        *,
        name: str | None = None,
    ) -> ScheduledEntry:
        """Register a (source, task) pair and start its execution path.

        Never blocks; safe to call while another thread is inside ``run()``.

        Args:
            source: Producer of due instants
            task: Task or plain callable fired at each instant
            name: Label used in logs and snapshots

        Returns:
            The started ScheduledEntry

        Raises:
            SchedulerStoppedError: ``stop()`` was already called
            TypeError: source or task has the wrong shape
        """
        if not isinstance(source, TemporalSource):
            raise TypeError(f"Expected a TemporalSource, got {type(source).__name__}")
        task = as_task(task)

        with self._changed:
            if self._stopped:
                raise SchedulerStoppedError()
            entry_id = next(self._ids)
            entry = ScheduledEntry(
                entry_id,
                name or f"entry-{entry_id}",
                source,
                task,
                clock=self.clock,
                timezone=self.timezone,
                on_finished=self._entry_finished,
            )
            self._entries.append(entry)
            self._changed.notify_all()

        logger.info(
            "Registered entry %s (%s) -> %r", entry.name, describe_source(source), task
        )
        entry.start()
        return entry

    def _entry_finished(self, entry: ScheduledEntry) -> None:
        with self._changed:
            self._changed.notify_all()

    # === Lifecycle ===

    def run(self, timeout: float | None = None) -> bool:
        """Block while entries are running.

        Returns when every registered entry has reached a terminal state,
        when ``stop()`` is called, or when ``timeout`` seconds have passed.
        Entries registered while waiting are waited for as well.

        Returns:
            True if every entry had finished when run() returned
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        logger.info("Scheduler running (%d entries)", len(self._entries))

        with self._changed:
            while not self._stopped and not self._all_finished():
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    break
                self._changed.wait(remaining)
            return self._all_finished()

    def stop(self, timeout: float | None = None) -> None:
        """Cancel every entry and wait for their threads.

        A task that is mid-execution cannot be interrupted; its thread is
        waited for at most ``timeout`` seconds (default
        ``settings.join_timeout_seconds``) in total.
        """
        with self._changed:
            if self._stopped:
                return
            self._stopped = True
            entries = list(self._entries)
            self._changed.notify_all()

        logger.info("Stopping scheduler (%d entries)...", len(entries))
        for entry in entries:
            entry.cancel()

        budget = self.settings.join_timeout_seconds if timeout is None else timeout
        deadline = time.monotonic() + budget
        for entry in entries:
            if not entry.join(max(0.0, deadline - time.monotonic())):
                logger.warning("Entry %s did not stop cleanly", entry.name)
        logger.info("Scheduler stopped")

    def cancel(self, entry_id: int) -> bool:
        """Cancel one entry. Returns False if no entry has that id."""
        entry = self.get(entry_id)
        if entry is None:
            return False
        entry.cancel()
        logger.info("Cancelled entry %s", entry.name)
        return True

    def get(self, entry_id: int) -> ScheduledEntry | None:
        with self._lock:
            for entry in self._entries:
                if entry.id == entry_id:
                    return entry
        return None

    @property
    def is_running(self) -> bool:
        """True while not stopped and at least one entry is still active."""
        with self._lock:
            return not self._stopped and not self._all_finished()

    @property
    def is_stopped(self) -> bool:
        return self._stopped

    def _all_finished(self) -> bool:
        return all(entry.finished for entry in self._entries)

    def __enter__(self) -> Scheduler:
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()

    # === Health & Stats ===

    def entries(self) -> list[EntrySnapshot]:
        """Snapshots of every registered entry, in registration order."""
        with self._lock:
            entries = list(self._entries)
        return [entry.snapshot() for entry in entries]

    def stats(self) -> SchedulerStats:
        """Aggregate statistics over all entries."""
        snapshots = self.entries()
        states = Counter(snapshot.state for snapshot in snapshots)
        return SchedulerStats(
            registered=len(snapshots),
            active=sum(n for state, n in states.items() if not state.is_terminal),
            executions=sum(snapshot.run_count for snapshot in snapshots),
            exhausted=states[EntryState.EXHAUSTED],
            cancelled=states[EntryState.CANCELLED],
            failures=states[EntryState.FAILED],
            by_state={state.value: n for state, n in states.items()},
        )

    def health(self) -> dict[str, Any]:
        """Return scheduler health status.

        Returns:
            dict with healthy, running, stopped, timezone, stats, entries
        """
        stats = self.stats()
        return {
            "healthy": not self._stopped and stats.failures == 0,
            "running": self.is_running,
            "stopped": self._stopped,
            "timezone": str(self.timezone),
            "stats": stats.to_dict(),
            "entries": [snapshot.to_dict() for snapshot in self.entries()],
        }


__all__ = ["Scheduler"]
