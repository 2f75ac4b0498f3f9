"""context-pruner: importance-based pruning for LLM conversation context.

Scores every record of a conversation (decisions, code and errors high;
acknowledgments and repeated tool output low) and trims the conversation
to a target size without ever splitting a tool call from its results.
"""

from context_pruner._version import __version__

# Core entry points
from context_pruner.engine.scorer import (
    SCORING_RULES,
    ScoringRule,
    find_repetitive_tool_outputs,
    score_breakdown,
    score_record,
)
from context_pruner.engine.pruner import effective_target, prune_records
from context_pruner.engine.pairing import build_tool_pairs

# Records
from context_pruner.models.record import ContentPart, Record, ToolCall, extract_text

# Configuration
from context_pruner.models.config import PrunerConfig, resolve_config

# Results
from context_pruner.models.prune import (
    ContextStats,
    ImportanceDistribution,
    PruneReport,
    PruneResult,
    ScoreBreakdown,
    ScoreStats,
)

# Protocols and collaborators
from context_pruner.protocols import RecordSource, TokenCounter
from context_pruner.engine.tokens import CharEstimateCounter, NullTokenCounter, TiktokenCounter
from context_pruner.operations.stats import context_stats, importance_distribution
from context_pruner.sources import InMemoryRecordSource
from context_pruner.storage.log import JsonlRecordLog
from context_pruner.storage.store import SqliteRecordStore
from context_pruner.service import ContextPruner

# Exceptions
from context_pruner.exceptions import (
    ConversationNotFoundError,
    PrunerError,
    RecordIndexError,
    RecordValidationError,
    StoreError,
)

__all__ = [
    "__version__",
    # Core
    "score_record",
    "score_breakdown",
    "find_repetitive_tool_outputs",
    "SCORING_RULES",
    "ScoringRule",
    "prune_records",
    "effective_target",
    "build_tool_pairs",
    # Records
    "Record",
    "ContentPart",
    "ToolCall",
    "extract_text",
    # Configuration
    "PrunerConfig",
    "resolve_config",
    # Results
    "PruneResult",
    "PruneReport",
    "ScoreStats",
    "ScoreBreakdown",
    "ImportanceDistribution",
    "ContextStats",
    # Collaborators
    "RecordSource",
    "TokenCounter",
    "CharEstimateCounter",
    "TiktokenCounter",
    "NullTokenCounter",
    "context_stats",
    "importance_distribution",
    "InMemoryRecordSource",
    "JsonlRecordLog",
    "SqliteRecordStore",
    "ContextPruner",
    # Exceptions
    "PrunerError",
    "RecordValidationError",
    "RecordIndexError",
    "StoreError",
    "ConversationNotFoundError",
]
