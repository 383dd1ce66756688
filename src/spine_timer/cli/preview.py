"""
CLI: ``spine-timer preview`` — show upcoming due instants without running anything.
"""

from __future__ import annotations

import typer

from spine_timer.cli.utils import (
    build_sources,
    parse_start,
    print_json,
    print_table,
    resolve_zone,
)
from spine_timer.core.period import IntervalStrategy
from spine_timer.core.settings import TimerSettings
from spine_timer.core.sources import describe_source, merge_upcoming


def preview(
    every: list[float] | None = typer.Option(
        None, "--every", "-e", help="Period length in seconds (repeatable)."
    ),
    cron: list[str] | None = typer.Option(
        None, "--cron", "-c", help="Calendar expression, seconds first (repeatable)."
    ),
    start: str | None = typer.Option(None, "--start", help="ISO-8601 anchor for periods."),
    timezone: str | None = typer.Option(None, "--timezone", "-z", help="IANA time zone."),
    strategy: IntervalStrategy = typer.Option(
        IntervalStrategy.CATCH_UP_ONCE, "--strategy", help="Period interval strategy."
    ),
    count: int = typer.Option(10, "--count", "-n", min=1, help="Number of instants."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Preview the next due instants of one or more schedules, merged in order."""
    settings = TimerSettings()
    tz = resolve_zone(timezone, settings)
    sources = build_sources(
        every,
        cron,
        start=parse_start(start, tz),
        tz=tz,
        strategy=strategy,
        settings=settings,
    )

    rows = [
        {"#": n, "due": due.isoformat(), "source": describe_source(sources[index])}
        for n, (index, due) in enumerate(merge_upcoming(sources, tz, count), start=1)
    ]
    if json_out:
        print_json(rows)
        return
    print_table(rows, title=f"Upcoming ({tz})")
