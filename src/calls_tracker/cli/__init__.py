"""
CLI application for Calls Tracker.

Turns predictions into timing-safe market calls and tracks caller reputation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import find_dotenv, load_dotenv

from calls_tracker.cli import calls as calls_commands
from calls_tracker.cli import reputation as reputation_commands
from calls_tracker.cli.utils import console
from calls_tracker.paths import DEFAULT_CALLS_PATH

app = typer.Typer(
    name="calls",
    help="Calls Tracker CLI - turn predictions into markets and rank the callers.",
    add_completion=False,
)

app.command("parse")(calls_commands.parse)
app.command("call")(calls_commands.call)
app.command("resolve")(calls_commands.resolve)
app.command("caller")(reputation_commands.caller)
app.command("leaderboard")(reputation_commands.leaderboard)
app.command("stats")(reputation_commands.stats)


@app.callback()
def main(
    ctx: typer.Context,
    data: Annotated[
        Path,
        typer.Option(
            "--data",
            "-d",
            help="Path to the calls JSON store.",
            envvar="CALLS_DATA_PATH",
        ),
    ] = DEFAULT_CALLS_PATH,
) -> None:
    """Calls Tracker CLI."""
    from calls_tracker.config import TrackerConfig

    load_dotenv(find_dotenv(usecwd=True))

    try:
        config = TrackerConfig.from_env()
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    ctx.obj = {"data_path": data, "config": config}


@app.command()
def version() -> None:
    """Show version information."""
    from calls_tracker import __version__

    console.print(f"calls-tracker v{__version__}")
