"""Shared utilities for CLI commands (console output, store access, async helpers)."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, TypeVar

import typer
from rich.console import Console

from calls_tracker.calls import CallStore
from calls_tracker.config import TrackerConfig
from calls_tracker.exceptions import StoreCorruptedError
from calls_tracker.paths import DEFAULT_CALLS_PATH

if TYPE_CHECKING:
    from collections.abc import Coroutine
    from datetime import datetime
    from pathlib import Path

    from calls_tracker.validation import ValidationResult

console = Console()

T = TypeVar("T")

SEVERITY_STYLES = {"critical": "red", "warning": "yellow", "info": "dim"}


def run_async(coro: Coroutine[object, object, T]) -> T:
    """Run a coroutine from a sync CLI command.

    Raises:
        typer.Exit: With code 130 on KeyboardInterrupt (standard SIGINT exit code).
    """
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        raise typer.Exit(130) from None


def get_config(ctx: typer.Context) -> TrackerConfig:
    obj = ctx.obj or {}
    config = obj.get("config")
    return config if isinstance(config, TrackerConfig) else TrackerConfig()


def get_data_path(ctx: typer.Context) -> Path:
    obj = ctx.obj or {}
    path: Path = obj.get("data_path", DEFAULT_CALLS_PATH)
    return path


def open_store(ctx: typer.Context) -> CallStore:
    """Open the JSON store selected by `--data`, exiting on a corrupt file."""
    path = get_data_path(ctx)
    try:
        return CallStore(path)
    except StoreCorruptedError as e:
        console.print(f"[red]Error:[/red] {e}")
        console.print("[dim]This command will not modify it.[/dim]")
        raise typer.Exit(1) from None


def fmt_time(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC") if value else "-"


def fmt_streak(streak: int) -> str:
    if streak > 0:
        return f"W{streak}"
    if streak < 0:
        return f"L{abs(streak)}"
    return "-"


def fmt_pnl(value: float) -> str:
    return f"+{value:.2f}" if value >= 0 else f"{value:.2f}"


def print_violations(result: ValidationResult) -> None:
    """Print a verdict line followed by one line per violation."""
    verdict = "[green]APPROVED[/green]" if result.approved else "[red]REJECTED[/red]"
    console.print(f"Validation: {verdict}")
    for violation in result.violations:
        style = SEVERITY_STYLES.get(violation.severity.value, "white")
        console.print(
            f"  [{style}]{violation.severity.value.upper()}[/{style}] "
            f"{violation.rule}: {violation.message}"
        )
