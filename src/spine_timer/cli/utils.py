"""
CLI utility helpers — argument conversion and output formatting.
"""

from __future__ import annotations

import json
from datetime import datetime, tzinfo
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from spine_timer.core.clock import SystemClock, ensure_aware
from spine_timer.core.errors import SpineTimerError
from spine_timer.core.period import IntervalStrategy, Period
from spine_timer.core.settings import TimerSettings, resolve_timezone
from spine_timer.core.sources import CronSchedule, TemporalSource

console = Console()
err_console = Console(stderr=True)

# click's exit status for usage errors
USAGE_ERROR = 2


# ── Failure helper ───────────────────────────────────────────────────────


def fail(message: str, *, code: int = USAGE_ERROR) -> NoReturn:
    """Print a red error on stderr and exit."""
    err_console.print(f"[bold red]Error[/bold red]: {escape(message)}")
    raise typer.Exit(code=code)


# ── Argument conversion ──────────────────────────────────────────────────


def resolve_zone(name: str | None, settings: TimerSettings) -> tzinfo:
    """``--timezone`` if given, otherwise the configured zone."""
    try:
        return resolve_timezone(name) if name else settings.tzinfo()
    except SpineTimerError as e:
        fail(e.message)


def parse_start(value: str | None, tz: tzinfo) -> datetime | None:
    """Parse an ISO-8601 ``--start``; naive values are read in ``tz``."""
    if value is None:
        return None
    try:
        return ensure_aware(datetime.fromisoformat(value), tz)
    except ValueError:
        fail(f"Invalid --start {value!r}: expected an ISO-8601 datetime")


def build_sources(
    every: list[float] | None,
    cron: list[str] | None,
    *,
    start: datetime | None,
    tz: tzinfo,
    strategy: IntervalStrategy,
    settings: TimerSettings,
) -> list[TemporalSource]:
    """Turn ``--every`` / ``--cron`` options into temporal sources, in option order."""
    if not every and not cron:
        fail("Give at least one --every SECONDS or --cron EXPR")

    clock = SystemClock()
    sources: list[TemporalSource] = []
    for seconds in every or []:
        anchor = start or clock.now(tz)
        result = Period.starting_at(anchor, seconds, tz, clock=clock)
        if result.is_err():
            fail(f"--every {seconds:g}: {result.error.message}")
        sources.append(result.unwrap().as_source(strategy))

    for expression in cron or []:
        parsed = CronSchedule.parse(
            expression,
            clock=clock,
            max_years_between_matches=settings.cron_max_years,
        )
        if parsed.is_err():
            fail(str(parsed.error))
        sources.append(parsed.unwrap())
    return sources


# ── Output helpers ───────────────────────────────────────────────────────


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for column in rows[0]:
        table.add_column(column, overflow="fold")
    for row in rows:
        table.add_row(*(str(v) for v in row.values()))
    console.print(table)
