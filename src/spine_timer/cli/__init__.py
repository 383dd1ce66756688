"""
CLI layer for spine-timer.

Provides a Typer application that previews and runs schedules. All timing
logic lives in ``spine_timer.core`` and ``spine_timer.scheduling``; this
package handles only terminal transport: argument parsing, coloured output,
and table formatting.

Entry point::

    spine-timer --help
"""

from spine_timer.cli.app import app

__all__ = ["app"]
