"""In-memory record source for host integrations and tests."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from context_pruner.models.record import Record


class InMemoryRecordSource:
    """List-backed RecordSource.

    Hands out copies so callers never mutate the live list through a
    snapshot.
    """

    def __init__(self, records: Iterable[Record] = ()) -> None:
        self._records: list[Record] = list(records)

    def get_records(self) -> list[Record]:
        return list(self._records)

    def set_records(self, records: Sequence[Record]) -> None:
        self._records = list(records)

    def append(self, record: Record) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)
