"""SqliteRecordStore -- persistent record sequences for many conversations.

The store is the mutation sink for hosts that keep their conversations in
a database: ``replace()`` swaps a conversation's whole record set inside a
single transaction, so readers never observe a half-pruned conversation.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from context_pruner.exceptions import ConversationNotFoundError, RecordValidationError
from context_pruner.models.record import Record
from context_pruner.storage.engine import create_session_factory, create_store_engine, init_db
from context_pruner.storage.schema import RecordRow
from context_pruner.storage.sqlite import SqliteRecordRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def _to_row(conversation_id: str, record: Record, position: int = 0) -> RecordRow:
    return RecordRow(
        conversation_id=conversation_id,
        position=position,
        role=record.role,
        payload_json=json.dumps(record.to_dict(), ensure_ascii=False),
        created_at=datetime.now(timezone.utc).replace(tzinfo=None),
    )


def _from_row(row: RecordRow) -> Record | None:
    try:
        return Record.from_dict(json.loads(row.payload_json))
    except (json.JSONDecodeError, RecordValidationError):
        logger.warning(
            "Skipping unreadable record %d of conversation %s",
            row.position, row.conversation_id,
        )
        return None


class SqliteRecordStore:
    """Record sequences keyed by conversation id.

    Example::

        with SqliteRecordStore.open("context.db") as store:
            store.append("chat-1", Record(role="user", content="hello"))
            pruner = ContextPruner(store.source("chat-1"))
    """

    def __init__(self, engine: Engine, *, owns_engine: bool = True) -> None:
        self._engine = engine
        self._owns_engine = owns_engine
        self._session_factory = create_session_factory(engine)

    @classmethod
    def open(cls, path: str = ":memory:", *, url: str | None = None) -> SqliteRecordStore:
        """Open (and initialize if needed) a store at ``path`` or ``url``."""
        engine = create_store_engine(path, url=url)
        init_db(engine)
        return cls(engine)

    def close(self) -> None:
        if self._owns_engine:
            self._engine.dispose()

    def __enter__(self) -> SqliteRecordStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def conversations(self) -> list[str]:
        with self._session_factory() as session:
            return SqliteRecordRepository(session).conversation_ids()

    def count(self, conversation_id: str) -> int:
        with self._session_factory() as session:
            return SqliteRecordRepository(session).count(conversation_id)

    def load(self, conversation_id: str, *, strict: bool = False) -> list[Record]:
        """Load a conversation in insertion order.

        Rows that no longer parse are skipped. With ``strict=True`` an
        unknown conversation raises ConversationNotFoundError instead of
        reading as empty.
        """
        with self._session_factory() as session:
            rows = SqliteRecordRepository(session).list(conversation_id)
        if not rows and strict:
            raise ConversationNotFoundError(conversation_id)
        records = []
        for row in rows:
            record = _from_row(row)
            if record is not None:
                records.append(record)
        return records

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def append(self, conversation_id: str, record: Record) -> None:
        with self._session_factory() as session, session.begin():
            SqliteRecordRepository(session).append(_to_row(conversation_id, record))

    def import_records(self, conversation_id: str, records: Iterable[Record]) -> int:
        """Append many records in one transaction. Returns the number added."""
        added = 0
        with self._session_factory() as session, session.begin():
            repo = SqliteRecordRepository(session)
            for record in records:
                repo.append(_to_row(conversation_id, record))
                added += 1
        logger.info("Imported %d record(s) into %s", added, conversation_id)
        return added

    def replace(self, conversation_id: str, records: Sequence[Record]) -> None:
        """Replace a conversation's records atomically."""
        with self._session_factory() as session, session.begin():
            repo = SqliteRecordRepository(session)
            repo.delete_conversation(conversation_id)
            session.add_all(
                _to_row(conversation_id, record, position)
                for position, record in enumerate(records)
            )

    def source(self, conversation_id: str) -> ConversationSource:
        """RecordSource view of one conversation."""
        return ConversationSource(self, conversation_id)


class ConversationSource:
    """RecordSource bound to a single conversation of a SqliteRecordStore."""

    def __init__(self, store: SqliteRecordStore, conversation_id: str) -> None:
        self.store = store
        self.conversation_id = conversation_id

    def get_records(self) -> list[Record]:
        return self.store.load(self.conversation_id)

    def set_records(self, records: Sequence[Record]) -> None:
        self.store.replace(self.conversation_id, records)
