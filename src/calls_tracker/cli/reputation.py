"""Typer commands for caller profiles, the leaderboard and tracker stats."""

from __future__ import annotations

import json
from typing import Annotated

import typer
from rich.table import Table

from calls_tracker.cli.utils import (
    console,
    fmt_pnl,
    fmt_streak,
    fmt_time,
    get_config,
    open_store,
)
from calls_tracker.reputation import (
    category_breakdown,
    rank_callers,
    score_caller,
    summarize_stats,
    weighted_accuracy,
)

_RECENT_CALLS = 10


def caller(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Caller name or id")],
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show a caller's reputation, streaks and recent calls."""
    from calls_tracker.calls import CallPipeline
    from calls_tracker.validation import SkippedReview

    config = get_config(ctx)
    store = open_store(ctx)
    caller_id = store.find_caller(name)
    if caller_id is None:
        console.print(f"[red]Error:[/red] Caller not found: {name}")
        raise typer.Exit(1)

    pipeline = CallPipeline(store, SkippedReview(), config=config)
    profile = pipeline.profile(caller_id)
    history = store.load_caller_history(caller_id)
    reputation = score_caller(profile, config=config)
    recency = weighted_accuracy(history, decay=config.confidence_decay_factor)

    if output_json:
        payload = {
            "caller_id": profile.caller_id,
            "name": profile.caller_name,
            "score": reputation.score,
            "tier": reputation.tier.value,
            "total_calls": profile.total_calls,
            "correct_calls": profile.correct_calls,
            "pending_calls": profile.pending_calls,
            "hit_rate": profile.hit_rate,
            "weighted_accuracy": recency,
            "current_streak": profile.current_streak,
            "best_streak": profile.best_streak,
            "worst_streak": profile.worst_streak,
            "total_wagered": profile.total_wagered,
            "pnl": profile.pnl,
            "details": reputation.details.model_dump(),
        }
        typer.echo(json.dumps(payload, indent=2, default=str))
        return

    console.print(
        f"[bold]{profile.caller_name}[/bold]: {reputation.tier.label} ({reputation.score}/100)"
    )
    console.print(
        f"  Calls: {profile.total_calls} ({profile.pending_calls} pending) | "
        f"Hit rate: {profile.hit_rate:.1%} | Recent accuracy: {recency:.1%}"
    )
    console.print(
        f"  Streak: {fmt_streak(profile.current_streak)} "
        f"(best W{profile.best_streak}, worst L{abs(profile.worst_streak)})"
    )
    console.print(f"  Wagered: {profile.total_wagered:.2f} | P&L: {fmt_pnl(profile.pnl)}")

    breakdown = category_breakdown(history)
    if breakdown:
        table = Table(title="By Category")
        table.add_column("Category", style="cyan")
        table.add_column("W", justify="right")
        table.add_column("L", justify="right")
        table.add_column("Hit%", justify="right")
        for row in breakdown:
            table.add_row(row.category.value, str(row.wins), str(row.losses), f"{row.hit_rate:.0%}")
        console.print(table)

    recent = list(reversed(history))[:_RECENT_CALLS]
    if recent:
        table = Table(title="Recent Calls")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Question")
        table.add_column("Closes")
        table.add_column("Result")
        for item in recent:
            result = item.outcome.value.upper() if item.outcome else "PENDING"
            table.add_row(item.id, item.question, fmt_time(item.closing_time), result)
        console.print(table)


def leaderboard(
    ctx: typer.Context,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum rows")] = 20,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Rank callers by reputation score."""
    from calls_tracker.calls import CallPipeline
    from calls_tracker.validation import SkippedReview

    config = get_config(ctx)
    store = open_store(ctx)
    pipeline = CallPipeline(store, SkippedReview(), config=config)
    entries = rank_callers(pipeline.profiles(), config=config)[:limit]

    if output_json:
        payload = [
            {
                "rank": entry.rank,
                "caller_id": entry.profile.caller_id,
                "name": entry.profile.caller_name,
                "score": entry.reputation.score,
                "tier": entry.reputation.tier.value,
                "total_calls": entry.profile.total_calls,
                "hit_rate": entry.profile.hit_rate,
            }
            for entry in entries
        ]
        typer.echo(json.dumps(payload, indent=2, default=str))
        return

    if not entries:
        console.print(
            f"[yellow]No ranked callers yet[/yellow] "
            f"(minimum {config.min_calls_for_ranking} calls required)"
        )
        return

    table = Table(title="Leaderboard")
    table.add_column("#", justify="right")
    table.add_column("Caller", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Tier")
    table.add_column("Calls", justify="right")
    table.add_column("Hit%", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Streak")
    for entry in entries:
        profile = entry.profile
        table.add_row(
            str(entry.rank),
            profile.caller_name,
            str(entry.reputation.score),
            entry.reputation.tier.label,
            str(profile.total_calls),
            f"{profile.hit_rate:.1%}",
            fmt_pnl(profile.pnl),
            fmt_streak(profile.current_streak),
        )
    console.print(table)


def stats(
    ctx: typer.Context,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show tracker-wide totals."""
    from calls_tracker.calls import CallPipeline
    from calls_tracker.validation import SkippedReview

    config = get_config(ctx)
    store = open_store(ctx)
    pipeline = CallPipeline(store, SkippedReview(), config=config)
    calls = store.list_all()
    summary = summarize_stats(calls, pipeline.profiles())

    if output_json:
        typer.echo(json.dumps(summary.model_dump(), indent=2, default=str))
        return

    table = Table(title="Calls Tracker Stats")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Callers", str(summary.total_callers))
    table.add_row("Calls", str(summary.total_calls))
    table.add_row("Resolved", str(summary.resolved_calls))
    table.add_row("Total wagered", f"{summary.total_wagered:.2f}")
    table.add_row("Average hit rate", f"{summary.average_hit_rate:.1%}")
    if calls:
        table.add_row("Latest call", fmt_time(calls[-1].created_at))
    console.print(table)
