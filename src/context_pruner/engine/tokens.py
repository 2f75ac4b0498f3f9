"""Token counting implementations for context-pruner.

Provides CharEstimateCounter (default, no dependencies), TiktokenCounter
(exact counts via tiktoken) and NullTokenCounter (testing). All implement
the TokenCounter protocol from protocols.py.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from context_pruner.models.record import IMAGE_PART_TYPES, Record

CHARS_PER_TOKEN = 4
IMAGE_CHARS = 1000
RECORD_OVERHEAD_CHARS = 10


class CharEstimateCounter:
    """Rough token estimate at ~4 characters per token.

    Image parts count as 1000 characters and every record adds 10
    characters of role/metadata overhead.

    Implements the TokenCounter protocol.
    """

    def count_text(self, text: str) -> int:
        if not text:
            return 0
        return math.ceil(len(text) / CHARS_PER_TOKEN)

    def count_records(self, records: Sequence[Record]) -> int:
        chars = 0
        for record in records:
            if isinstance(record.content, str):
                chars += len(record.content)
            elif record.content:
                for part in record.content:
                    if part.is_text and part.text:
                        chars += len(part.text)
                    if part.type in IMAGE_PART_TYPES:
                        chars += IMAGE_CHARS
            chars += RECORD_OVERHEAD_CHARS
        return math.ceil(chars / CHARS_PER_TOKEN)


class TiktokenCounter:
    """Token counter using tiktoken (OpenAI's tokenizer).

    Lazily imports tiktoken and caches the Encoding instance.
    Falls back to o200k_base encoding if model is unknown.

    Implements the TokenCounter protocol.
    """

    def __init__(self, model: str = "gpt-4o", encoding_name: str | None = None) -> None:
        import tiktoken

        if encoding_name is not None:
            self._enc = tiktoken.get_encoding(encoding_name)
        else:
            try:
                self._enc = tiktoken.encoding_for_model(model)
            except KeyError:
                self._enc = tiktoken.get_encoding("o200k_base")

        self._encoding_name = self._enc.name

    @property
    def encoding_name(self) -> str:
        """Name of the tiktoken encoding being used."""
        return self._encoding_name

    def count_text(self, text: str) -> int:
        if not text:
            return 0
        return len(self._enc.encode(text))

    def count_records(self, records: Sequence[Record]) -> int:
        """Count tokens including 3 tokens of per-record overhead.

        Non-text parts are not tokenized; image parts are charged the same
        flat estimate as CharEstimateCounter.
        """
        total = 0
        for record in records:
            total += 3
            total += self.count_text(record.text)
            if isinstance(record.content, tuple):
                total += sum(
                    IMAGE_CHARS // CHARS_PER_TOKEN
                    for part in record.content
                    if part.type in IMAGE_PART_TYPES
                )
        return total


class NullTokenCounter:
    """Token counter that always returns 0.

    Useful for testing when token counts are irrelevant.
    """

    def count_text(self, text: str) -> int:
        return 0

    def count_records(self, records: Sequence[Record]) -> int:
        return 0
