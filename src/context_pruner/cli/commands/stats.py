"""context-pruner stats -- show context size and importance distribution."""

from __future__ import annotations

import click


@click.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show message count, estimated tokens, thresholds and importance distribution."""
    from context_pruner.cli import _pruner_session
    from context_pruner.cli.formatting import format_stats

    with _pruner_session(ctx) as (pruner, _source, console):
        format_stats(pruner.stats(), console)
