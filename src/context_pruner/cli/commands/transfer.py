"""context-pruner import/export -- move conversations between JSONL and the store."""

from __future__ import annotations

import os

import click

from context_pruner.cli.formatting import format_error, get_console


@click.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--as", "conversation_id", default=None, help="Conversation ID (default: file stem).")
@click.option("--replace", "do_replace", is_flag=True, help="Replace the conversation instead of appending.")
@click.pass_context
def import_cmd(ctx: click.Context, path: str, conversation_id: str | None, do_replace: bool) -> None:
    """Load a JSONL transcript into the record store.

    Malformed lines are skipped and reported.
    """
    from context_pruner.storage.log import JsonlRecordLog
    from context_pruner.storage.store import SqliteRecordStore

    console = get_console()
    conversation_id = conversation_id or os.path.splitext(os.path.basename(path))[0]
    try:
        log = JsonlRecordLog(path)
        records = log.read()
        with SqliteRecordStore.open(ctx.obj["db_path"]) as store:
            if do_replace:
                store.replace(conversation_id, records)
            else:
                store.import_records(conversation_id, records)
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    console.print(
        f"Imported [green]{len(records)}[/green] records into "
        f"[cyan]{conversation_id}[/cyan]"
    )
    if log.last_skipped:
        console.print(f"[yellow]Skipped {log.last_skipped} malformed line(s).[/yellow]")


@click.command("export")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_context
def export_cmd(ctx: click.Context, path: str) -> None:
    """Write the conversation to a JSONL transcript."""
    from context_pruner.cli import _pruner_session
    from context_pruner.storage.log import JsonlRecordLog

    with _pruner_session(ctx) as (_pruner, source, console):
        records = source.get_records()
        JsonlRecordLog(path).write(records)
        console.print(f"Exported [green]{len(records)}[/green] records to {path}")
