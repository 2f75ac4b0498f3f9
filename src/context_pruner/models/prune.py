"""Domain models for scoring and pruning results.

Provides frozen data classes for score breakdowns, prune results,
importance distributions and context statistics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from context_pruner.models.record import Record


@dataclass(frozen=True)
class ScoreBreakdown:
    """An importance score plus the names of the rules that produced it."""

    score: float
    rules: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScoreStats:
    """Min/max/average score of a group of records (zeros when empty)."""

    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0

    @classmethod
    def from_scores(cls, scores: list[float]) -> ScoreStats:
        if not scores:
            return cls()
        return cls(min=min(scores), max=max(scores), avg=sum(scores) / len(scores))


@dataclass(frozen=True)
class PruneResult:
    """Result of a pruning pass.

    ``kept`` preserves the original relative order. ``removed_count`` may
    exceed the quota when a tool call/result cluster had to be removed as
    a whole.
    """

    kept: list[Record]
    removed_count: int
    original_count: int
    removed_scores: ScoreStats = field(default_factory=ScoreStats)
    removed_indices: tuple[int, ...] = ()
    effective_target: int = 0

    @property
    def changed(self) -> bool:
        return self.removed_count > 0


@dataclass(frozen=True)
class PruneReport:
    """A prune result as seen by a host: token savings and whether it was applied."""

    result: PruneResult
    tokens_before: int
    tokens_after: int
    applied: bool
    dry_run: bool = False

    @property
    def tokens_saved(self) -> int:
        return self.tokens_before - self.tokens_after


@dataclass(frozen=True)
class ImportanceDistribution:
    """Record counts per importance bucket."""

    low: int = 0  # < 0.3
    medium: int = 0  # < 0.55
    high: int = 0  # < 0.75
    critical: int = 0

    @property
    def total(self) -> int:
        return self.low + self.medium + self.high + self.critical


@dataclass(frozen=True)
class ContextStats:
    """Size and importance overview of a record sequence."""

    message_count: int
    estimated_tokens: int
    distribution: ImportanceDistribution
    max_messages: int
    target_messages: int
    auto_prune: bool

    @property
    def over_threshold(self) -> int:
        """Records above max_messages (0 when under)."""
        return max(0, self.message_count - self.max_messages)

    @property
    def headroom(self) -> int:
        """Records left before auto-pruning triggers (0 when over)."""
        return max(0, self.max_messages - self.message_count)
