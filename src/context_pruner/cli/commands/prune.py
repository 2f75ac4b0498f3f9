"""context-pruner prune -- remove low-importance records."""

from __future__ import annotations

import click


@click.command()
@click.option(
    "--aggressive",
    "aggressiveness",
    default=1.0,
    show_default=True,
    type=click.FloatRange(0.5, 3.0),
    help="Aggressiveness (0.5 = gentle, 1.0 = normal, 2.0+ = aggressive).",
)
@click.option("--dry-run", is_flag=True, help="Show what would be pruned without pruning.")
@click.pass_context
def prune(ctx: click.Context, aggressiveness: float, dry_run: bool) -> None:
    """Prune the conversation down to its target size.

    Decisions, code and recent context are kept; acknowledgments and
    repeated tool output go first.
    """
    from context_pruner.cli import _pruner_session
    from context_pruner.cli.formatting import format_prune_report

    with _pruner_session(ctx) as (pruner, _source, console):
        report = pruner.prune(aggressiveness, dry_run=dry_run)
        format_prune_report(report, console)
