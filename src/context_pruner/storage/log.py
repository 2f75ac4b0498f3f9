"""Newline-delimited JSON record log.

Each line is one independently parseable record dict. Reads are tolerant:
blank lines are ignored and malformed lines are skipped (and counted)
rather than aborting the read. Writes replace the file atomically.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path

from context_pruner.exceptions import RecordValidationError
from context_pruner.models.record import Record

logger = logging.getLogger(__name__)


def parse_record_lines(lines: Iterable[str | bytes]) -> tuple[list[Record], int]:
    """Parse JSONL lines into records.

    Byte lines are decoded as UTF-8 one at a time, so an undecodable line
    is skipped like any other malformed line.

    Returns:
        Tuple of (records, skipped_line_count).
    """
    records: list[Record] = []
    skipped = 0
    for lineno, line in enumerate(lines, start=1):
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError:
                logger.warning("Skipping line %d: not valid UTF-8", lineno)
                skipped += 1
                continue
        line = line.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning("Skipping line %d: invalid JSON (%s)", lineno, e.msg)
            skipped += 1
            continue
        if not isinstance(data, dict):
            logger.warning("Skipping line %d: not a JSON object", lineno)
            skipped += 1
            continue
        try:
            records.append(Record.from_dict(data))
        except RecordValidationError:
            logger.warning("Skipping line %d: not a valid record", lineno)
            skipped += 1
    return records, skipped


def dump_record_line(record: Record) -> str:
    return json.dumps(record.to_dict(), ensure_ascii=False)


class JsonlRecordLog:
    """A record sequence persisted as a JSONL file.

    Implements the RecordSource protocol, so it can be handed straight to
    :class:`~context_pruner.service.ContextPruner`.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self.last_skipped = 0

    def read(self) -> list[Record]:
        """Read all parseable records. A missing file reads as empty."""
        if not self.path.exists():
            self.last_skipped = 0
            return []
        with self.path.open("rb") as f:
            records, self.last_skipped = parse_record_lines(f)
        if self.last_skipped:
            logger.warning(
                "Skipped %d malformed line(s) in %s", self.last_skipped, self.path
            )
        return records

    def write(self, records: Sequence[Record]) -> None:
        """Replace the log contents with ``records``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                for record in records:
                    f.write(dump_record_line(record))
                    f.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def append(self, record: Record) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(dump_record_line(record))
            f.write("\n")

    # RecordSource protocol

    def get_records(self) -> list[Record]:
        return self.read()

    def set_records(self, records: Sequence[Record]) -> None:
        self.write(records)
