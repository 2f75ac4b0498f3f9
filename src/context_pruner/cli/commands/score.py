"""context-pruner score -- score a single record by index."""

from __future__ import annotations

import click


@click.command()
@click.argument("index", type=int)
@click.pass_context
def score(ctx: click.Context, index: int) -> None:
    """Show the importance score of the record at INDEX."""
    from context_pruner.cli import _pruner_session
    from context_pruner.cli.formatting import format_score

    with _pruner_session(ctx) as (pruner, source, console):
        breakdown = pruner.score(index)
        role = source.get_records()[index].role
        format_score(index, role, breakdown, console)
