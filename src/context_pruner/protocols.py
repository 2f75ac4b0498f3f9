"""Protocol definitions for context-pruner.

Defines the pluggable interfaces the core is wired to: TokenCounter for
token estimates and RecordSource for the host's live record set.

No SQLAlchemy imports allowed in this module -- pure domain protocols.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from context_pruner.models.record import Record


@runtime_checkable
class TokenCounter(Protocol):
    """Counts tokens in text and in record sequences."""

    def count_text(self, text: str) -> int: ...

    def count_records(self, records: Sequence[Record]) -> int: ...


@runtime_checkable
class RecordSource(Protocol):
    """Accessor and mutation sink for a live record sequence.

    ``get_records`` returns a snapshot in insertion order. ``set_records``
    replaces the whole set; callers that share a source are responsible
    for read-modify-write atomicity.
    """

    def get_records(self) -> list[Record]: ...

    def set_records(self, records: Sequence[Record]) -> None: ...
