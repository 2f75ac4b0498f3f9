"""Rich formatting helpers for the context-pruner CLI.

Provides functions that format result objects for terminal display.
Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from context_pruner.models.prune import ContextStats, PruneReport, ScoreBreakdown


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_tokens(n: int) -> str:
    """Compact token count: 950, 1.2k, 3.4M."""
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 1_000:
        return f"{n / 1_000:.1f}k"
    return str(n)


def format_stats(stats: ContextStats, console: Console) -> None:
    """Display context size, thresholds and importance distribution."""
    console.print(f"Messages:         {stats.message_count}")
    console.print(f"Estimated tokens: [green]{format_tokens(stats.estimated_tokens)}[/green]")
    console.print(
        f"Threshold:        {stats.max_messages} (prune to {stats.target_messages})"
    )
    console.print(f"Auto-prune:       {'on' if stats.auto_prune else 'off'}")
    console.print()

    dist = stats.distribution
    table = Table(title="Importance distribution", show_header=True, header_style="bold", box=None)
    table.add_column("Bucket")
    table.add_column("Range", style="dim")
    table.add_column("Count", justify="right")
    table.add_row("[magenta]critical[/magenta]", "0.75-1.0", str(dist.critical))
    table.add_row("[green]high[/green]", "0.55-0.74", str(dist.high))
    table.add_row("[yellow]medium[/yellow]", "0.3-0.54", str(dist.medium))
    table.add_row("[red]low[/red]", "0-0.29", str(dist.low))
    console.print(table)
    console.print()

    if stats.over_threshold:
        console.print(f"[red]Over threshold by {stats.over_threshold} messages[/red]")
    else:
        console.print(f"[dim]{stats.headroom} messages until auto-prune triggers[/dim]")


def format_prune_report(report: PruneReport, console: Console) -> None:
    """Display the outcome of a prune (or dry run)."""
    result = report.result
    if not result.changed:
        console.print(
            f"Nothing to prune. {result.original_count} messages, all within threshold."
        )
        return

    scores = result.removed_scores
    if report.dry_run:
        console.print(
            f"[yellow]Would remove[/yellow] {result.removed_count} of "
            f"{result.original_count} messages"
        )
    else:
        console.print(
            f"[green]Pruned[/green] {result.removed_count} of "
            f"{result.original_count} messages"
        )
    console.print(f"  Kept:   {len(result.kept)}")
    console.print(
        f"  Tokens: {format_tokens(report.tokens_before)} -> "
        f"{format_tokens(report.tokens_after)} "
        f"(saved ~{format_tokens(report.tokens_saved)})"
    )
    console.print(
        f"  Removed score range: {scores.min:.2f} - {scores.max:.2f} "
        f"(avg {scores.avg:.2f})"
    )


def format_score(index: int, role: str, breakdown: ScoreBreakdown, console: Console) -> None:
    """Display a single record's score and the rules that fired."""
    console.print(
        f"Message {index} ([cyan]{escape(role)}[/cyan]): "
        f"score [bold]{breakdown.score:.3f}[/bold]"
    )
    if breakdown.rules:
        console.print(f"  Rules: [dim]{', '.join(breakdown.rules)}[/dim]")


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
