"""context-pruner CLI -- inspect and prune stored conversations.

This module is NEVER imported from context_pruner/__init__.py.
It is only loaded via the ``context-pruner`` entry point defined in
pyproject.toml.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

import click

from context_pruner.cli.formatting import format_error, get_console
from context_pruner.exceptions import StoreError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console

    from context_pruner.models.config import PrunerConfig
    from context_pruner.protocols import RecordSource
    from context_pruner.service import ContextPruner
    from context_pruner.storage.store import SqliteRecordStore


@click.group()
@click.option(
    "--db",
    default=".context_pruner.db",
    envvar="CONTEXT_PRUNER_DB",
    help="Path to the record store database.",
)
@click.option(
    "--conversation",
    "conversation_id",
    default=None,
    envvar="CONTEXT_PRUNER_CONVERSATION",
    help="Conversation ID (auto-discovered if omitted).",
)
@click.option(
    "--log",
    "log_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Operate on a JSONL transcript instead of the store.",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    envvar="CONTEXT_PRUNER_CONFIG",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with pruning settings.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    db: str,
    conversation_id: str | None,
    log_path: str | None,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Importance-based pruning for LLM conversation context."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db
    ctx.obj["conversation_id"] = conversation_id
    ctx.obj["log_path"] = log_path
    ctx.obj["config_path"] = config_path


def _load_config(config_path: str | None) -> PrunerConfig:
    """Read a JSON settings file through resolve_config()."""
    from context_pruner.models.config import resolve_config

    if config_path is None:
        return resolve_config(None)
    with open(config_path, encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise click.BadParameter("config file must contain a JSON object", param_hint="--config")
    return resolve_config(raw)


def _discover_conversation(store: SqliteRecordStore) -> str:
    """Pick the only conversation in the store, or fail."""
    conversation_ids = store.conversations()
    if len(conversation_ids) == 0:
        raise StoreError("No conversations found in database.")
    if len(conversation_ids) > 1:
        raise StoreError(
            f"Multiple conversations found ({len(conversation_ids)}). "
            f"Use --conversation to specify one."
        )
    return conversation_ids[0]


@contextmanager
def _open_source(ctx: click.Context) -> Iterator[RecordSource]:
    """Yield the RecordSource selected by the group options."""
    import os

    from context_pruner.storage.log import JsonlRecordLog
    from context_pruner.storage.store import SqliteRecordStore

    if ctx.obj["log_path"] is not None:
        yield JsonlRecordLog(ctx.obj["log_path"])
        return

    db_path = ctx.obj["db_path"]
    if not os.path.exists(db_path):
        raise StoreError(f"Database not found: {db_path}")

    store = SqliteRecordStore.open(db_path)
    try:
        conversation_id = ctx.obj["conversation_id"] or _discover_conversation(store)
        yield store.source(conversation_id)
    finally:
        store.close()


@contextmanager
def _pruner_session(ctx: click.Context) -> Iterator[tuple[ContextPruner, RecordSource, Console]]:
    """Open the selected source, yield (pruner, source, console), and handle cleanup.

    Exceptions are formatted as CLI errors and exit with status 1.
    """
    from context_pruner.service import ContextPruner

    console = get_console()
    try:
        config = _load_config(ctx.obj["config_path"])
        with _open_source(ctx) as source:
            yield ContextPruner(source, config), source, console
    except (SystemExit, click.ClickException):
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from context_pruner.cli.commands.stats import stats  # noqa: E402
from context_pruner.cli.commands.prune import prune  # noqa: E402
from context_pruner.cli.commands.score import score  # noqa: E402
from context_pruner.cli.commands.transfer import export_cmd, import_cmd  # noqa: E402

cli.add_command(stats)
cli.add_command(prune)
cli.add_command(score)
cli.add_command(import_cmd)
cli.add_command(export_cmd)
