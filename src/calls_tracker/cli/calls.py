"""Typer commands for turning predictions into calls and resolving them."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Annotated

import typer
from rich.table import Table

from calls_tracker.cli.utils import (
    console,
    fmt_pnl,
    fmt_streak,
    fmt_time,
    get_config,
    open_store,
    print_violations,
    run_async,
)
from calls_tracker.exceptions import (
    AmbiguousCallIdError,
    CallAlreadyResolvedError,
    CallNotFoundError,
)
from calls_tracker.models import CallOutcome, CallPhase
from calls_tracker.parser import PredictionParser
from calls_tracker.parser._rules import pretag_regime
from calls_tracker.timing import classify_proposal

if TYPE_CHECKING:
    from calls_tracker.calls import Submission


def parse(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Prediction text, e.g. 'BTC will hit $110k by March 1'")],
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Parse a prediction and show the market it would become (nothing is saved)."""
    config = get_config(ctx)
    proposal = PredictionParser(config).parse(text)
    classification = classify_proposal(proposal, event_buffer_hours=config.min_hours_before_event)
    pretag = pretag_regime(text)

    if output_json:
        payload = {
            "question": proposal.question,
            "category": proposal.category.value,
            "asset": proposal.asset.ticker if proposal.asset else None,
            "price_target": proposal.price_target,
            "direction": proposal.direction.value if proposal.direction else None,
            "deadline": proposal.deadline.isoformat(),
            "confidence": proposal.confidence,
            "regime": classification.regime.value,
            "regime_pretag": pretag.value,
            "closing_time": proposal.closing_time.isoformat(),
            "compliant": classification.compliant,
            "reason": classification.reason,
            "data_source": proposal.data_source,
            "data_source_url": proposal.data_source_url,
        }
        typer.echo(json.dumps(payload, indent=2, default=str))
        return

    table = Table(title="Parsed Prediction")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Question", proposal.question)
    table.add_row("Category", proposal.category.value)
    table.add_row("Asset", f"{proposal.asset.name} ({proposal.asset.ticker})" if proposal.asset else "-")
    table.add_row("Price target", f"{proposal.price_target:,.2f}" if proposal.price_target else "-")
    table.add_row("Direction", proposal.direction.value if proposal.direction else "-")
    table.add_row("Deadline", fmt_time(proposal.deadline))
    table.add_row("Confidence", f"{proposal.confidence:.0%}")
    table.add_row("Regime", classification.regime.value)
    table.add_row("Closes", fmt_time(proposal.closing_time))
    table.add_row("Data source", f"{proposal.data_source} ({proposal.data_source_url})")
    table.add_row("Timing", classification.reason)
    console.print(table)

    if pretag != classification.regime:
        console.print(
            f"[yellow]Note:[/yellow] the text reads as {pretag.value}, the question as "
            f"{classification.regime.value}; the question wins."
        )


def call(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Prediction text")],
    caller: Annotated[str, typer.Option("--caller", "-c", help="Caller display name")],
    wager: Annotated[
        float | None, typer.Option("--wager", "-w", help="Wager amount (default from config)")
    ] = None,
    offline: Annotated[
        bool, typer.Option("--offline", help="Skip external review (local checks only)")
    ] = False,
) -> None:
    """Record a new call: parse, enforce timing, validate, and save."""
    from calls_tracker.calls import CallPipeline
    from calls_tracker.validation import ReviewClient, SkippedReview

    config = get_config(ctx)
    if wager is not None and wager <= 0:
        console.print("[red]Error:[/red] Wager must be positive")
        raise typer.Exit(1)

    store = open_store(ctx)

    async def _submit() -> Submission:
        if offline:
            pipeline = CallPipeline(store, SkippedReview(), config=config)
            return await pipeline.submit(text, caller, wager=wager)
        async with ReviewClient.from_config(config) as reviewer:
            pipeline = CallPipeline(store, reviewer, config=config)
            return await pipeline.submit(text, caller, wager=wager)

    try:
        submission = run_async(_submit())
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    console.print(f"Question: [bold]{submission.proposal.question}[/bold]")
    console.print(f"Timing: {submission.classification.reason}")
    if submission.adjusted:
        console.print(
            f"[yellow]Closing time adjusted[/yellow] to {fmt_time(submission.proposal.closing_time)}"
        )
    print_violations(submission.validation)

    if submission.call is None:
        raise typer.Exit(1)

    console.print(f"\n[green]✓[/green] Call saved: {submission.call.id}")
    console.print(f"  Closes: {fmt_time(submission.call.closing_time)}")
    console.print(f"  Wager: {submission.call.wager:g} on {submission.call.side.value.upper()}")


def resolve(
    ctx: typer.Context,
    call_id: Annotated[
        str | None, typer.Argument(help="Call id (or unique prefix). Omit to list open calls.")
    ] = None,
    outcome: Annotated[
        CallOutcome | None, typer.Option("--outcome", "-o", help="win, loss or void")
    ] = None,
) -> None:
    """Resolve a call, or list unresolved calls when no id is given."""
    from calls_tracker.calls import CallPipeline
    from calls_tracker.reputation import score_caller
    from calls_tracker.validation import SkippedReview

    store = open_store(ctx)

    if call_id is None:
        unresolved = store.list_unresolved()
        if not unresolved:
            console.print("[yellow]No unresolved calls.[/yellow]")
            return
        now = datetime.now(UTC)
        table = Table(title="Unresolved Calls")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Caller")
        table.add_column("Question")
        table.add_column("Closes")
        table.add_column("Status")
        phase_styles = {CallPhase.OPEN: "green", CallPhase.CLOSED: "yellow", CallPhase.READY: "red"}
        for item in unresolved:
            phase = item.phase(now)
            style = phase_styles[phase]
            table.add_row(
                item.id,
                item.caller_name,
                item.question,
                fmt_time(item.closing_time),
                f"[{style}]{phase.value.upper()}[/{style}]",
            )
        console.print(table)
        return

    if outcome is None:
        console.print("[red]Error:[/red] --outcome is required when resolving a call")
        raise typer.Exit(1)

    config = get_config(ctx)
    pipeline = CallPipeline(store, SkippedReview(), config=config)
    try:
        profile = pipeline.resolve(call_id, outcome)
    except (CallNotFoundError, AmbiguousCallIdError, CallAlreadyResolvedError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    reputation = score_caller(profile, config=config)
    console.print(f"[green]✓[/green] Resolved {call_id} as {outcome.value.upper()}")
    console.print(
        f"  {profile.caller_name}: {reputation.tier.label} ({reputation.score}/100), "
        f"hit rate {profile.hit_rate:.1%}, streak {fmt_streak(profile.current_streak)}, "
        f"P&L {fmt_pnl(profile.pnl)}"
    )
