"""Context statistics: size, token estimate and importance distribution."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from context_pruner.engine.scorer import score_record
from context_pruner.engine.tokens import CharEstimateCounter
from context_pruner.models.prune import ContextStats, ImportanceDistribution

if TYPE_CHECKING:
    from context_pruner.models.config import PrunerConfig
    from context_pruner.models.record import Record
    from context_pruner.protocols import TokenCounter

LOW_UPPER = 0.3
MEDIUM_UPPER = 0.55
HIGH_UPPER = 0.75


def importance_distribution(records: Sequence[Record]) -> ImportanceDistribution:
    """Bucket records by raw score: low < 0.3 <= medium < 0.55 <= high < 0.75 <= critical."""
    low = medium = high = critical = 0
    for record in records:
        score = score_record(record)
        if score < LOW_UPPER:
            low += 1
        elif score < MEDIUM_UPPER:
            medium += 1
        elif score < HIGH_UPPER:
            high += 1
        else:
            critical += 1
    return ImportanceDistribution(low=low, medium=medium, high=high, critical=critical)


def context_stats(
    records: Sequence[Record],
    config: PrunerConfig,
    counter: TokenCounter | None = None,
) -> ContextStats:
    """Summarize a record sequence against the pruning policy."""
    counter = counter or CharEstimateCounter()
    return ContextStats(
        message_count=len(records),
        estimated_tokens=counter.count_records(records),
        distribution=importance_distribution(records),
        max_messages=config.max_messages,
        target_messages=config.target_messages,
        auto_prune=config.auto_prune,
    )
