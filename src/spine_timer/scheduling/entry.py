"""Scheduled entry — one temporal source driving one task on its own thread.

┌──────────────────────────────────────────────────────────────────────────────┐
│  ENTRY THREAD                                                                 │
│                                                                               │
│   start()                                                                     │
│      │                                                                        │
│      ▼                                                                        │
│   ┌─────────────────────────────────────────────────────────┐                 │
│   │              Daemon Thread (loop)                       │                 │
│   │                                                         │                 │
│   │   for due in source.iter_times(tz):                     │                 │
│   │       delay = max(0, due - clock.now())                 │                 │
│   │       if cancel_event.wait(delay):    ◄── only wait     │                 │
│   │           -> CANCELLED                                  │                 │
│   │       task.execute()                  ◄── Invoke        │                 │
│   │   -> EXHAUSTED                                          │                 │
│   │                                                         │                 │
│   └─────────────────────────────────────────────────────────┘                 │
│                                                                               │
│   cancel()                                                                    │
│      │                                                                        │
│      ▼                                                                        │
│   cancel_event.set()   (honoured at the wait and before each run)            │
│                                                                               │
│  A task that raises ends this thread only (state FAILED, error kept).        │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Awaitable, Callable
from datetime import datetime, tzinfo
from typing import Any

from spine_timer.core.clock import Clock, seconds_until
from spine_timer.core.sources import TemporalSource, describe_source
from spine_timer.core.tasks import Task

from .protocol import EntrySnapshot, EntryState

logger = logging.getLogger(__name__)


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class ScheduledEntry:
    """Binds one temporal source to one task and drives it on a daemon thread.

    Entries are created by ``Scheduler.register``; they are not shared
    between threads for mutation apart from the cancellation event and the
    status fields guarded by ``_lock``.
    """

    def __init__(
        self,
        entry_id: int,
        name: str,
        source: TemporalSource,
        task: Task,
        *,
        clock: Clock,
        timezone: tzinfo,
        on_finished: Callable[[ScheduledEntry], None] | None = None,
    ) -> None:
        self.id = entry_id
        self.name = name
        self.source = source
        self.task = task
        self.clock = clock
        self.timezone = timezone
        self._on_finished = on_finished

        self._cancel_event = threading.Event()
        self._finished = threading.Event()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

        self._state = EntryState.PENDING
        self._next_due: datetime | None = None
        self._run_count = 0
        self._last_run: datetime | None = None
        self.error: BaseException | None = None

    # === Lifecycle ===

    def start(self) -> None:
        """Start the entry's thread. Starting twice is ignored with a warning."""
        if self._thread is not None:
            logger.warning("Entry %s already started", self.name)
            return
        self._thread = threading.Thread(
            target=self._loop, daemon=True, name=f"spine-timer-{self.name}"
        )
        self._thread.start()

    def cancel(self) -> None:
        """Ask the entry to stop at its next suspension point."""
        self._cancel_event.set()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the entry's thread to end. Returns True if it has ended."""
        return self._finished.wait(timeout)

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    @property
    def state(self) -> EntryState:
        with self._lock:
            return self._state

    @property
    def run_count(self) -> int:
        with self._lock:
            return self._run_count

    @property
    def next_due(self) -> datetime | None:
        with self._lock:
            return self._next_due

    def snapshot(self) -> EntrySnapshot:
        """Point-in-time status of this entry."""
        with self._lock:
            return EntrySnapshot(
                id=self.id,
                name=self.name,
                source=describe_source(self.source),
                state=self._state,
                next_due=self._next_due,
                run_count=self._run_count,
                last_run=self._last_run,
                error=repr(self.error) if self.error is not None else None,
            )

    # === Execution path ===

    def _loop(self) -> None:
        logger.info("Entry %s started (%s)", self.name, describe_source(self.source))
        try:
            final_state = self._drive()
        # SystemExit from a task ends this entry only
        except BaseException as e:
            with self._lock:
                self._state = EntryState.FAILED
                self._next_due = None
                self.error = e
            logger.exception("Entry %s failed: %r", self.name, e)
        else:
            with self._lock:
                self._state = final_state
                self._next_due = None
                run_count = self._run_count
            if final_state is EntryState.CANCELLED:
                logger.info("Entry %s cancelled after %d run(s)", self.name, run_count)
            else:
                logger.info("Entry %s exhausted after %d run(s)", self.name, run_count)
        finally:
            self._finished.set()
            if self._on_finished is not None:
                self._on_finished(self)

    def _drive(self) -> EntryState:
        for due in self.source.iter_times(self.timezone):
            with self._lock:
                self._state = EntryState.PENDING
                self._next_due = due

            if self._sleep_until(due):
                return EntryState.CANCELLED

            with self._lock:
                self._state = EntryState.DUE
            if self._cancel_event.is_set():
                return EntryState.CANCELLED

            with self._lock:
                self._state = EntryState.EXECUTING
            self._execute()
            with self._lock:
                self._run_count += 1
                self._last_run = self.clock.now(self.timezone)

            if self._cancel_event.is_set():
                return EntryState.CANCELLED
        return EntryState.EXHAUSTED

    def _sleep_until(self, due: datetime) -> bool:
        """Wait until ``due`` on the entry's clock. Returns True if cancelled meanwhile."""
        delay = seconds_until(due, self.clock.now(self.timezone))
        logger.debug("Entry %s due at %s (in %.3fs)", self.name, due.isoformat(), delay)
        # Event.wait rejects timeouts above TIMEOUT_MAX
        while delay > threading.TIMEOUT_MAX:
            if self._cancel_event.wait(threading.TIMEOUT_MAX):
                return True
            delay = seconds_until(due, self.clock.now(self.timezone))
        return self._cancel_event.wait(delay)

    def _execute(self) -> None:
        result = self.task.execute()
        if inspect.isawaitable(result):
            asyncio.run(_await(result))

    def __repr__(self) -> str:
        return f"ScheduledEntry(id={self.id}, name={self.name!r}, state={self.state.value})"


__all__ = ["ScheduledEntry"]
