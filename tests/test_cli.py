"""CLI tests for context-pruner -- exercises every command via Click's CliRunner.

Each test uses runner.isolated_filesystem() with a file-backed store,
since the CLI opens its own connection.
"""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from context_pruner.cli import cli
from context_pruner.storage.log import JsonlRecordLog
from context_pruner.storage.store import SqliteRecordStore
from tests.conftest import generic_records, system, user


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def runner():
    """Create a Click test runner."""
    return CliRunner()


def _setup_store(db_path: str, records=None, *, conversation_id: str = "chat") -> None:
    """Create a store with one conversation (100 generic records by default)."""
    with SqliteRecordStore.open(db_path) as store:
        store.import_records(conversation_id, records if records is not None else generic_records(100))


def _count(db_path: str, conversation_id: str = "chat") -> int:
    with SqliteRecordStore.open(db_path) as store:
        return store.count(conversation_id)


# ---------------------------------------------------------------------------
# stats
# ---------------------------------------------------------------------------


class TestStatsCommand:
    def test_stats(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db")
            result = runner.invoke(cli, ["--db", "test.db", "stats"])
            assert result.exit_code == 0, result.output
            assert "Messages:" in result.output
            assert "100" in result.output
            assert "Importance distribution" in result.output
            assert "until auto-prune" in result.output

    def test_stats_over_threshold(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db", generic_records(110))
            result = runner.invoke(cli, ["--db", "test.db", "stats"])
            assert result.exit_code == 0
            assert "Over threshold by 10" in result.output

    def test_missing_db(self, runner: CliRunner):
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["--db", "missing.db", "stats"])
            assert result.exit_code == 1
            assert "Database not found" in result.output

    def test_db_from_envvar(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("env.db")
            result = runner.invoke(cli, ["stats"], env={"CONTEXT_PRUNER_DB": "env.db"})
            assert result.exit_code == 0, result.output


# ---------------------------------------------------------------------------
# Conversation selection
# ---------------------------------------------------------------------------


class TestConversationSelection:
    def test_multiple_conversations_require_flag(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db", conversation_id="a")
            _setup_store("test.db", conversation_id="b")
            result = runner.invoke(cli, ["--db", "test.db", "stats"])
            assert result.exit_code == 1
            assert "Multiple conversations" in result.output

    def test_explicit_conversation(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db", conversation_id="a")
            _setup_store("test.db", generic_records(5), conversation_id="b")
            result = runner.invoke(cli, ["--db", "test.db", "--conversation", "b", "prune"])
            assert result.exit_code == 0, result.output
            assert "Nothing to prune" in result.output

    def test_empty_store(self, runner: CliRunner):
        with runner.isolated_filesystem():
            SqliteRecordStore.open("test.db").close()
            result = runner.invoke(cli, ["--db", "test.db", "stats"])
            assert result.exit_code == 1
            assert "No conversations" in result.output


# ---------------------------------------------------------------------------
# prune
# ---------------------------------------------------------------------------


class TestPruneCommand:
    def test_prune_applies(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db")
            result = runner.invoke(cli, ["--db", "test.db", "prune"])
            assert result.exit_code == 0, result.output
            assert "Pruned 40 of 100 messages" in result.output
            assert _count("test.db") == 60

    def test_dry_run(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db")
            result = runner.invoke(cli, ["--db", "test.db", "prune", "--dry-run"])
            assert result.exit_code == 0, result.output
            assert "Would remove 40 of 100 messages" in result.output
            assert _count("test.db") == 100

    def test_aggressive(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db")
            result = runner.invoke(cli, ["--db", "test.db", "prune", "--aggressive", "2"])
            assert result.exit_code == 0, result.output
            assert _count("test.db") == 30

    @pytest.mark.parametrize("value", ["0.1", "5", "fast"])
    def test_aggressive_out_of_range(self, runner: CliRunner, value):
        with runner.isolated_filesystem():
            _setup_store("test.db")
            result = runner.invoke(cli, ["--db", "test.db", "prune", "--aggressive", value])
            assert result.exit_code == 2
            assert _count("test.db") == 100

    def test_nothing_to_prune(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db", generic_records(10))
            result = runner.invoke(cli, ["--db", "test.db", "prune"])
            assert result.exit_code == 0
            assert "Nothing to prune. 10 messages" in result.output

    def test_config_file(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db")
            with open("pruner.json", "w") as f:
                json.dump({"maxMessages": 30, "targetMessages": 20}, f)
            result = runner.invoke(cli, ["--db", "test.db", "--config", "pruner.json", "prune"])
            assert result.exit_code == 0, result.output
            assert _count("test.db") == 20

    def test_config_not_an_object(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db")
            with open("pruner.json", "w") as f:
                json.dump([1, 2, 3], f)
            result = runner.invoke(cli, ["--db", "test.db", "--config", "pruner.json", "prune"])
            assert result.exit_code == 2
            assert _count("test.db") == 100

    def test_prune_jsonl_log(self, runner: CliRunner):
        with runner.isolated_filesystem():
            JsonlRecordLog("chat.jsonl").write(generic_records(100))
            result = runner.invoke(cli, ["--log", "chat.jsonl", "prune"])
            assert result.exit_code == 0, result.output
            assert len(JsonlRecordLog("chat.jsonl").read()) == 60


# ---------------------------------------------------------------------------
# score
# ---------------------------------------------------------------------------


class TestScoreCommand:
    def test_score(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db", [system("You are a careful reviewer."), user("```\nx = 1\n```")])
            result = runner.invoke(cli, ["--db", "test.db", "score", "1"])
            assert result.exit_code == 0, result.output
            assert "Message 1" in result.output
            assert "user" in result.output
            assert "0.900" in result.output
            assert "code-block" in result.output

    def test_score_invalid_index(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db", [user("a"), user("b")])
            result = runner.invoke(cli, ["--db", "test.db", "score", "5"])
            assert result.exit_code == 1
            assert "Invalid index 5" in result.output
            assert "0-1" in result.output


# ---------------------------------------------------------------------------
# import / export
# ---------------------------------------------------------------------------


class TestTransferCommands:
    def test_import(self, runner: CliRunner):
        with runner.isolated_filesystem():
            with open("session.jsonl", "w") as f:
                f.write('{"role": "user", "content": "hello there"}\n')
                f.write("not json\n")
                f.write('{"role": "assistant", "content": "hi"}\n')
            result = runner.invoke(cli, ["--db", "test.db", "import", "session.jsonl"])
            assert result.exit_code == 0, result.output
            assert "Imported 2 records into session" in result.output
            assert "Skipped 1 malformed" in result.output
            assert _count("test.db", "session") == 2

    def test_import_as_and_replace(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db", generic_records(5))
            JsonlRecordLog("new.jsonl").write([user("fresh start")])
            result = runner.invoke(
                cli, ["--db", "test.db", "import", "new.jsonl", "--as", "chat", "--replace"]
            )
            assert result.exit_code == 0, result.output
            assert _count("test.db") == 1

    def test_import_appends_by_default(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db", generic_records(5))
            JsonlRecordLog("new.jsonl").write([user("one more")])
            result = runner.invoke(cli, ["--db", "test.db", "import", "new.jsonl", "--as", "chat"])
            assert result.exit_code == 0, result.output
            assert _count("test.db") == 6

    def test_export(self, runner: CliRunner):
        with runner.isolated_filesystem():
            _setup_store("test.db", generic_records(7))
            result = runner.invoke(cli, ["--db", "test.db", "export", "out.jsonl"])
            assert result.exit_code == 0, result.output
            assert "Exported 7 records" in result.output
            assert JsonlRecordLog("out.jsonl").read() == generic_records(7)
