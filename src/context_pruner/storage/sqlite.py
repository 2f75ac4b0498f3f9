"""SQLite implementation of the record repository.

Uses SQLAlchemy 2.0-style queries (select() + session.execute()).
The repository takes a Session in its constructor; transaction boundaries
belong to the caller.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from context_pruner.storage.repositories import RecordRepository
from context_pruner.storage.schema import RecordRow


class SqliteRecordRepository(RecordRepository):
    """SQLite implementation of record repository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list(self, conversation_id: str) -> Sequence[RecordRow]:
        stmt = (
            select(RecordRow)
            .where(RecordRow.conversation_id == conversation_id)
            .order_by(RecordRow.position)
        )
        return self._session.execute(stmt).scalars().all()

    def count(self, conversation_id: str) -> int:
        stmt = select(func.count()).select_from(RecordRow).where(
            RecordRow.conversation_id == conversation_id
        )
        return self._session.execute(stmt).scalar_one()

    def _next_position(self, conversation_id: str) -> int:
        stmt = select(func.max(RecordRow.position)).where(
            RecordRow.conversation_id == conversation_id
        )
        current = self._session.execute(stmt).scalar_one_or_none()
        return 0 if current is None else current + 1

    def append(self, row: RecordRow) -> None:
        row.position = self._next_position(row.conversation_id)
        self._session.add(row)
        self._session.flush()

    def delete_conversation(self, conversation_id: str) -> int:
        stmt = delete(RecordRow).where(RecordRow.conversation_id == conversation_id)
        result = self._session.execute(stmt)
        self._session.flush()
        return result.rowcount or 0

    def conversation_ids(self) -> list[str]:
        stmt = select(RecordRow.conversation_id).distinct().order_by(RecordRow.conversation_id)
        return list(self._session.execute(stmt).scalars())
