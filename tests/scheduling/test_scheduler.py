"""Tests for spine_timer.scheduling.service — the threaded in-memory scheduler."""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta

import pytest

from spine_timer.core.clock import FixedClock, SystemClock
from spine_timer.core.errors import SchedulerStoppedError
from spine_timer.core.period import Period
from spine_timer.core.settings import TimerSettings
from spine_timer.core.sources import Bounded, CronSchedule, Once
from spine_timer.core.tasks import PrintingTask
from spine_timer.scheduling import EntryState, Scheduler

FAR_FUTURE = datetime(2099, 1, 1, tzinfo=UTC)


class TestSchedulerInit:
    def test_defaults(self, settings):
        sched = Scheduler(settings=settings)
        assert isinstance(sched.clock, SystemClock)
        assert str(sched.timezone) == "UTC"
        assert sched.is_running is False
        assert sched.is_stopped is False

    def test_timezone_from_settings(self):
        sched = Scheduler(settings=TimerSettings(timezone="Europe/Berlin"))
        assert str(sched.timezone) == "Europe/Berlin"

    def test_run_without_entries_returns_immediately(self, scheduler):
        """run() with nothing registered returns at once."""
        assert scheduler.run(timeout=5) is True


class TestRegistration:
    def test_period_fires_until_exhausted(self, scheduler, period):
        """A bounded period fires each instant, then the entry is EXHAUSTED."""
        calls = []
        entry = scheduler.register(Bounded(period, count=3), lambda: calls.append(1))

        assert scheduler.run(timeout=5) is True
        assert len(calls) == 3
        assert entry.state is EntryState.EXHAUSTED
        assert entry.run_count == 3

    def test_cron_source_fires(self, settings):
        """Calendar sources are driven the same way as periods."""
        calls = []
        sched = Scheduler(FixedClock(datetime(2100, 1, 1, tzinfo=UTC)), settings=settings)
        schedule = CronSchedule(
            "0 30 12 1,15 May * 2099", clock=FixedClock(datetime(2020, 1, 1, tzinfo=UTC))
        )
        entry = sched.register(schedule, lambda: calls.append(1), name="cron")

        assert sched.run(timeout=5) is True
        assert len(calls) == 2
        assert entry.state is EntryState.EXHAUSTED
        sched.stop()

    def test_period_at_end_of_time_is_exhausted(self, settings):
        """A period whose next instant cannot be represented ends as EXHAUSTED."""
        calls = []
        start = datetime(9999, 12, 31, tzinfo=UTC)
        sched = Scheduler(FixedClock(datetime(9999, 12, 31, 12, tzinfo=UTC)), settings=settings)
        period = Period.starting_at(start, timedelta(days=1)).unwrap()
        entry = sched.register(period.as_source("fixed"), lambda: calls.append(1))

        assert sched.run(timeout=5) is True
        assert calls == [1]
        assert entry.state is EntryState.EXHAUSTED
        sched.stop()

    def test_default_names_are_unique(self, scheduler):
        first = scheduler.register(Once(FAR_FUTURE), PrintingTask())
        second = scheduler.register(Once(FAR_FUTURE), PrintingTask())
        assert first.id != second.id
        assert first.name != second.name

    def test_rejects_non_source(self, scheduler):
        with pytest.raises(TypeError):
            scheduler.register(object(), PrintingTask())

    def test_rejects_non_task(self, scheduler):
        with pytest.raises(TypeError):
            scheduler.register(Once(FAR_FUTURE), 42)

    def test_register_after_stop_raises(self, scheduler):
        scheduler.stop()
        with pytest.raises(SchedulerStoppedError):
            scheduler.register(Once(FAR_FUTURE), PrintingTask())

    def test_register_while_running(self, scheduler, period):
        """Entries added from another thread during run() are waited for."""
        calls = []
        gate = scheduler.register(Once(FAR_FUTURE), PrintingTask(), name="gate")

        def late_register():
            scheduler.register(Bounded(period, count=2), lambda: calls.append(1))
            gate.cancel()

        timer = threading.Timer(0.05, late_register)
        timer.start()
        assert scheduler.run(timeout=5) is True
        timer.join()
        assert len(calls) == 2


class TestIsolation:
    def test_blocked_task_does_not_delay_others(self, scheduler, period, wait_for):
        """One entry blocked mid-task never holds up another entry."""
        release = threading.Event()
        started = threading.Event()
        calls = []

        def blocking():
            started.set()
            release.wait(5)

        slow = scheduler.register(Once(datetime(2030, 1, 1, tzinfo=UTC)), blocking, name="slow")
        assert started.wait(5)
        fast = scheduler.register(Bounded(period, count=2), lambda: calls.append(1), name="fast")

        assert fast.join(5) is True
        assert len(calls) == 2
        assert slow.state is EntryState.EXECUTING

        release.set()
        assert scheduler.run(timeout=5) is True
        assert slow.state is EntryState.EXHAUSTED

    def test_failing_task_ends_only_its_entry(self, scheduler, period):
        """A raising task marks its entry FAILED; others keep running."""
        calls = []

        def boom():
            raise RuntimeError("task exploded")

        bad = scheduler.register(Bounded(period, count=3), boom, name="bad")
        good = scheduler.register(Bounded(period, count=2), lambda: calls.append(1), name="good")

        assert scheduler.run(timeout=5) is True
        assert bad.state is EntryState.FAILED
        assert isinstance(bad.error, RuntimeError)
        assert bad.run_count == 0
        assert good.state is EntryState.EXHAUSTED
        assert len(calls) == 2

    def test_system_exit_in_task_is_a_failure(self, scheduler):
        """sys.exit() inside a task fails its entry; stats and health agree."""

        def leave():
            raise SystemExit(3)

        entry = scheduler.register(Once(datetime(2030, 1, 1, tzinfo=UTC)), leave, name="exit")

        assert scheduler.run(timeout=5) is True
        assert entry.state is EntryState.FAILED
        assert isinstance(entry.error, SystemExit)
        health = scheduler.health()
        assert health["stats"]["active"] == 0
        assert health["stats"]["failures"] == 1
        assert health["running"] is False

    def test_async_task_is_awaited(self, scheduler, period):
        """Coroutine functions run to completion on the entry's thread."""
        calls = []

        async def job():
            calls.append(threading.current_thread().name)

        scheduler.register(Bounded(period, count=2), job, name="async")
        assert scheduler.run(timeout=5) is True
        assert calls == ["spine-timer-async", "spine-timer-async"]


class TestCancellation:
    def test_cancel_pending_entry(self, settings, wait_for):
        """cancel() interrupts the wait; the task never runs."""
        sched = Scheduler(settings=settings)
        calls = []
        entry = sched.register(Once(FAR_FUTURE), lambda: calls.append(1))
        assert wait_for(lambda: entry.next_due is not None)

        assert sched.cancel(entry.id) is True
        assert entry.join(2) is True
        assert entry.state is EntryState.CANCELLED
        assert calls == []
        sched.stop()

    def test_cancel_unknown_id(self, scheduler):
        assert scheduler.cancel(999) is False

    def test_stop_cancels_everything(self, settings):
        sched = Scheduler(settings=settings)
        entries = [sched.register(Once(FAR_FUTURE), PrintingTask()) for _ in range(3)]
        sched.stop()

        assert sched.is_stopped is True
        assert all(entry.state is EntryState.CANCELLED for entry in entries)
        assert sched.run(timeout=1) is True

    def test_stop_is_idempotent(self, scheduler):
        scheduler.stop()
        scheduler.stop()
        assert scheduler.is_stopped is True

    def test_run_times_out(self, settings):
        """run() returns False when entries are still pending at the timeout."""
        sched = Scheduler(settings=settings)
        sched.register(Once(FAR_FUTURE), PrintingTask())
        assert sched.run(timeout=0.05) is False
        assert sched.is_running is True
        sched.stop()
        assert sched.is_running is False

    def test_context_manager_stops(self, settings):
        with Scheduler(settings=settings) as sched:
            entry = sched.register(Once(FAR_FUTURE), PrintingTask())
        assert sched.is_stopped is True
        assert entry.state is EntryState.CANCELLED


class TestHealthAndStats:
    def test_stats_after_run(self, scheduler, period):
        scheduler.register(Bounded(period, count=3), lambda: None)
        scheduler.run(timeout=5)

        stats = scheduler.stats()
        assert stats.registered == 1
        assert stats.active == 0
        assert stats.executions == 3
        assert stats.exhausted == 1
        assert stats.failures == 0
        assert stats.by_state == {"EXHAUSTED": 1}

    def test_health_reports_failures(self, scheduler, period):
        def boom():
            raise ValueError("nope")

        scheduler.register(Bounded(period, count=1), boom, name="bad")
        scheduler.run(timeout=5)

        health = scheduler.health()
        assert health["healthy"] is False
        assert health["running"] is False
        assert health["timezone"] == "UTC"
        assert health["stats"]["failures"] == 1
        [entry] = health["entries"]
        assert entry["state"] == "FAILED"
        assert "nope" in entry["error"]

    def test_entries_in_registration_order(self, scheduler):
        scheduler.register(Once(FAR_FUTURE), PrintingTask(), name="a")
        scheduler.register(Once(FAR_FUTURE), PrintingTask(), name="b")
        assert [s.name for s in scheduler.entries()] == ["a", "b"]

    def test_get_entry(self, scheduler):
        entry = scheduler.register(Once(FAR_FUTURE), PrintingTask())
        assert scheduler.get(entry.id) is entry
        assert scheduler.get(12345) is None

    def test_period_renders_in_scheduler_zone(self, overdue_clock, period, wait_for):
        """Due instants are rendered in the scheduler's zone."""
        sched = Scheduler(overdue_clock, settings=TimerSettings(timezone="Europe/Berlin"))
        release = threading.Event()
        entry = sched.register(period, lambda: release.wait(5))
        assert wait_for(lambda: entry.state is EntryState.EXECUTING)
        assert str(entry.next_due.tzinfo) == "Europe/Berlin"
        release.set()
        sched.stop()
