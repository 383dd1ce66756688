"""
Root Typer application for the spine-timer CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from spine_timer.cli.preview import preview
from spine_timer.cli.run import run

app = Typer(
    name="spine-timer",
    help="spine-timer — fire tasks on recurring periods and calendar expressions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        from spine_timer import __version__

        try:
            v = pkg_version("spine-timer")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"spine-timer {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """spine-timer CLI — preview and run schedules."""


# ── Command registration ─────────────────────────────────────────────────

app.command("preview")(preview)
app.command("run")(run)
