"""Context pruning logic.

Takes a record sequence, scores every record, and removes the least
important ones while respecting constraints: the first and last N records
are protected, the final record (the active turn) is always kept, and tool
calls are removed together with their results or not at all.

The engine never mutates its input and keeps no state between calls.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from context_pruner.engine.pairing import build_tool_pairs, pair_cluster
from context_pruner.engine.scorer import find_repetitive_tool_outputs, score_record
from context_pruner.models.config import PrunerConfig
from context_pruner.models.prune import PruneResult, ScoreStats
from context_pruner.models.record import Record

logger = logging.getLogger(__name__)

# Score ceiling for tool outputs that repeat the previous tool output
REPETITIVE_SCORE_CAP = 0.2


@dataclass(frozen=True)
class _ScoredRecord:
    index: int
    score: float
    protected: bool


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def effective_target(config: PrunerConfig, aggressiveness: float = 1.0) -> int:
    """Target size after applying aggressiveness.

    Aggressiveness above 1 prunes harder, below 1 gentler. The target never
    drops below the protected zones plus one prunable slot.
    """
    if not math.isfinite(aggressiveness) or aggressiveness <= 0:
        logger.warning("Invalid aggressiveness %r, using 1.0", aggressiveness)
        aggressiveness = 1.0
    protected = max(0, config.preserve_first) + max(0, config.preserve_recent)
    return max(protected + 1, _round_half_up(config.target_messages / aggressiveness))


def _unchanged(records: Sequence[Record], target: int) -> PruneResult:
    return PruneResult(
        kept=list(records),
        removed_count=0,
        original_count=len(records),
        effective_target=target,
    )


def prune_records(
    records: Sequence[Record],
    config: PrunerConfig,
    aggressiveness: float = 1.0,
) -> PruneResult:
    """Remove the least important records until the sequence fits the target.

    Args:
        records: The full record sequence, oldest first.
        config: Pruning policy (already resolved by :func:`resolve_config`).
        aggressiveness: Divides the target size (0.5 = gentle, 2.0 = aggressive).

    Returns:
        PruneResult with the kept records in original order. When a tool
        call/result cluster is removed the removed count may exceed the
        quota; an orphaned half-pair would be worse than a smaller kept set.
    """
    total = len(records)
    if total == 0:
        return _unchanged(records, 0)

    target = effective_target(config, aggressiveness)
    if total <= target:
        return _unchanged(records, target)

    preserve_first = max(0, config.preserve_first)
    preserve_recent = max(0, config.preserve_recent)

    tool_pairs = build_tool_pairs(records)
    repetitive = find_repetitive_tool_outputs(records)

    scored: list[_ScoredRecord] = []
    for i, record in enumerate(records):
        score = score_record(record)
        if i in repetitive:
            score = min(score, REPETITIVE_SCORE_CAP)
        protected = (
            i < preserve_first
            or i >= total - preserve_recent
            or i == total - 1
        )
        scored.append(_ScoredRecord(index=i, score=score, protected=protected))

    # Below-floor records form the first tier; ascending score within a tier,
    # ties broken by position.
    prunable = sorted(
        (s for s in scored if not s.protected),
        key=lambda s: (s.score >= config.min_importance, s.score, s.index),
    )

    to_remove: set[int] = set()
    need_to_remove = total - target

    for candidate in prunable:
        if len(to_remove) >= need_to_remove:
            break
        if candidate.index in to_remove:
            continue

        if candidate.index not in tool_pairs:
            to_remove.add(candidate.index)
            continue

        cluster = pair_cluster(tool_pairs, candidate.index)
        if any(scored[idx].protected for idx in cluster):
            logger.debug(
                "Skipping record %d: paired with a protected record", candidate.index
            )
            continue
        to_remove |= cluster

    kept: list[Record] = []
    removed_scores: list[float] = []
    for i, record in enumerate(records):
        if i in to_remove:
            removed_scores.append(scored[i].score)
        else:
            kept.append(record)

    logger.debug(
        "Pruned %d of %d records (target %d, quota %d)",
        len(to_remove), total, target, need_to_remove,
    )

    return PruneResult(
        kept=kept,
        removed_count=len(to_remove),
        original_count=total,
        removed_scores=ScoreStats.from_scores(removed_scores),
        removed_indices=tuple(sorted(to_remove)),
        effective_target=target,
    )
