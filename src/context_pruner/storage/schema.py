"""SQLAlchemy ORM schema for the record store.

Defines the tables: records (one row per record, ordered by position within
a conversation) and _store_meta (schema version).
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

SCHEMA_VERSION = "1"


class Base(DeclarativeBase):
    """Base class for all record store ORM models."""

    pass


class RecordRow(Base):
    """One persisted record. ``payload_json`` holds ``Record.to_dict()``."""

    __tablename__ = "records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    conversation_id: Mapped[str] = mapped_column(String(64), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    payload_json: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_records_conversation_position", "conversation_id", "position", unique=True),
    )


class StoreMetaRow(Base):
    """Key-value metadata (schema version)."""

    __tablename__ = "_store_meta"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
