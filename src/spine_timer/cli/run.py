"""
CLI: ``spine-timer run`` — drive a scheduler that prints a message on every tick.
"""

from __future__ import annotations

import typer

from spine_timer.cli.utils import (
    build_sources,
    console,
    parse_start,
    print_table,
    resolve_zone,
)
from spine_timer.core.logging import configure_logging
from spine_timer.core.period import IntervalStrategy
from spine_timer.core.settings import TimerSettings
from spine_timer.core.sources import Bounded, describe_source
from spine_timer.core.tasks import PrintingTask
from spine_timer.scheduling import Scheduler


def run(
    every: list[float] | None = typer.Option(
        None, "--every", "-e", help="Period length in seconds (repeatable)."
    ),
    cron: list[str] | None = typer.Option(
        None, "--cron", "-c", help="Calendar expression, seconds first (repeatable)."
    ),
    message: str = typer.Option(
        "Running printing Task... Goodbye", "--message", "-m", help="Text printed on each run."
    ),
    start: str | None = typer.Option(None, "--start", help="ISO-8601 anchor for periods."),
    timezone: str | None = typer.Option(None, "--timezone", "-z", help="IANA time zone."),
    runs: int | None = typer.Option(None, "--runs", min=1, help="Stop each schedule after N runs."),
    timeout: float | None = typer.Option(
        None, "--timeout", min=0, help="Stop after this many seconds."
    ),
) -> None:
    """Run a printing task on each schedule until they finish, time out or Ctrl-C."""
    settings = TimerSettings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)

    tz = resolve_zone(timezone, settings)
    sources = build_sources(
        every,
        cron,
        start=parse_start(start, tz),
        tz=tz,
        strategy=IntervalStrategy.CATCH_UP_ONCE,
        settings=settings,
    )

    scheduler = Scheduler(timezone=tz, settings=settings)
    for source in sources:
        bounded = Bounded(source, count=runs) if runs is not None else source
        entry = scheduler.register(bounded, PrintingTask(message), name=describe_source(source))
        console.print(f"[green]✓[/green] Scheduled [cyan]{entry.name}[/cyan] (id {entry.id})")

    try:
        scheduler.run(timeout=timeout)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
    finally:
        scheduler.stop()

    print_table(
        [
            {"id": s.id, "name": s.name, "state": s.state.value, "runs": s.run_count}
            for s in scheduler.entries()
        ],
        title="Entries",
    )
