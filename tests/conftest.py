"""Shared test fixtures for context-pruner.

Provides record builders, an in-memory record store, and a default config.
"""

from __future__ import annotations

import pytest

from context_pruner.models.config import PrunerConfig
from context_pruner.models.record import ContentPart, Record, ToolCall
from context_pruner.storage.store import SqliteRecordStore


# ------------------------------------------------------------------
# Record builders
# ------------------------------------------------------------------

# Neutral assistant text: baseline score 0.4, no pattern fires.
GENERIC_TEXT = "Here is a short summary of where things are with the work so far"


def user(text: str) -> Record:
    return Record(role="user", content=text)


def assistant(text: str = GENERIC_TEXT) -> Record:
    return Record(role="assistant", content=text)


def system(text: str) -> Record:
    return Record(role="system", content=text)


def tool_call(*call_ids: str, name: str = "run") -> Record:
    """Assistant record requesting one tool call per id."""
    return Record(
        role="assistant",
        content="",
        tool_calls=tuple(ToolCall(id=cid, name=name, arguments={}) for cid in call_ids),
    )


def tool_result(call_id: str | None, text: str) -> Record:
    return Record(role="tool", content=text, tool_call_id=call_id)


def image(role: str = "user") -> Record:
    return Record(
        role=role,
        content=(ContentPart(type="image_url", data={"image_url": {"url": "data:..."}}),),
    )


def generic_records(n: int) -> list[Record]:
    return [assistant(f"{GENERIC_TEXT} number {i}") for i in range(n)]


# ------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------


@pytest.fixture
def config() -> PrunerConfig:
    """Default policy: max 100, target 60, floor 0.3, protect first 3 / last 10."""
    return PrunerConfig()


@pytest.fixture
def store():
    """In-memory record store, closed after the test."""
    s = SqliteRecordStore.open(":memory:")
    yield s
    s.close()
