"""ContextPruner -- host-facing facade over the scorer and pruning engine.

A host hands the facade a RecordSource (its live record set) and a policy.
The facade reads a snapshot, runs the engine, and writes the kept records
back through the same source. It is the only place that mutates anything.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from context_pruner.engine.pruner import prune_records
from context_pruner.engine.scorer import score_breakdown
from context_pruner.engine.tokens import CharEstimateCounter
from context_pruner.exceptions import RecordIndexError
from context_pruner.models.config import PrunerConfig
from context_pruner.models.prune import PruneReport
from context_pruner.operations.stats import context_stats

if TYPE_CHECKING:
    from context_pruner.models.prune import ContextStats, ScoreBreakdown
    from context_pruner.protocols import RecordSource, TokenCounter

logger = logging.getLogger(__name__)


class ContextPruner:
    """Prunes a host's record set according to a PrunerConfig.

    Constructor Args:
        source: Accessor/mutation sink for the live records.
        config: Pruning policy; defaults to ``PrunerConfig()``.
        token_counter: Used for token estimates in reports and stats.
    """

    def __init__(
        self,
        source: RecordSource,
        config: PrunerConfig | None = None,
        *,
        token_counter: TokenCounter | None = None,
    ) -> None:
        self._source = source
        self._config = config or PrunerConfig()
        self._counter = token_counter or CharEstimateCounter()
        logger.info(
            "context-pruner: initialized (max: %d, target: %d, auto: %s)",
            self._config.max_messages,
            self._config.target_messages,
            self._config.auto_prune,
        )

    @property
    def config(self) -> PrunerConfig:
        return self._config

    def stats(self) -> ContextStats:
        """Current size, token estimate and importance distribution."""
        return context_stats(self._source.get_records(), self._config, self._counter)

    def prune(self, aggressiveness: float = 1.0, *, dry_run: bool = False) -> PruneReport:
        """Prune the live records now.

        The kept records are written back unless ``dry_run`` is set or
        nothing was removed.
        """
        records = self._source.get_records()
        result = prune_records(records, self._config, aggressiveness)

        tokens_before = self._counter.count_records(records)
        tokens_after = (
            self._counter.count_records(result.kept) if result.changed else tokens_before
        )

        applied = False
        if result.changed and not dry_run:
            self._source.set_records(result.kept)
            applied = True
            logger.info(
                "context-pruner: removed %d messages (%d tokens saved)",
                result.removed_count,
                tokens_before - tokens_after,
            )

        return PruneReport(
            result=result,
            tokens_before=tokens_before,
            tokens_after=tokens_after,
            applied=applied,
            dry_run=dry_run,
        )

    def before_agent_start(self) -> PruneReport | None:
        """Auto-prune hook, run before each agent turn.

        Does nothing unless auto-pruning is enabled and the record count is
        above ``max_messages``. Failures are logged, never raised into the
        host's turn.
        """
        if not self._config.auto_prune:
            return None
        try:
            records = self._source.get_records()
            if len(records) <= self._config.max_messages:
                return None

            result = prune_records(records, self._config)
            if not result.changed:
                return None

            self._source.set_records(result.kept)
            logger.info(
                "context-pruner: auto-pruned %d messages (%d -> %d)",
                result.removed_count,
                len(records),
                len(result.kept),
            )
            return PruneReport(
                result=result,
                tokens_before=self._counter.count_records(records),
                tokens_after=self._counter.count_records(result.kept),
                applied=True,
            )
        except Exception as exc:
            logger.warning("context-pruner: auto-prune failed: %s", exc)
            return None

    def score(self, index: int) -> ScoreBreakdown:
        """Score of the record at ``index`` (negative indices not allowed).

        Raises:
            RecordIndexError: If index is outside the current sequence.
        """
        records = self._source.get_records()
        if index < 0 or index >= len(records):
            raise RecordIndexError(index, len(records))
        return score_breakdown(records[index])
