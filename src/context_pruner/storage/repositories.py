"""Abstract repository interface for record storage.

No SQLAlchemy imports here -- pure abstract contract.
The concrete implementation is in sqlite.py.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from context_pruner.storage.schema import RecordRow


class RecordRepository(ABC):
    """Abstract interface for record storage operations."""

    @abstractmethod
    def list(self, conversation_id: str) -> Sequence[RecordRow]:
        """All rows of a conversation ordered by position."""
        ...

    @abstractmethod
    def count(self, conversation_id: str) -> int:
        """Number of records in a conversation."""
        ...

    @abstractmethod
    def append(self, row: RecordRow) -> None:
        """Add a row at the end of its conversation (position is assigned)."""
        ...

    @abstractmethod
    def delete_conversation(self, conversation_id: str) -> int:
        """Delete every row of a conversation. Returns the number deleted."""
        ...

    @abstractmethod
    def conversation_ids(self) -> list[str]:
        """Distinct conversation ids, sorted."""
        ...
