"""Record importance scoring.

Each record gets a 0-1 score. Higher = more important = keep.
All scoring is local -- regex and heuristics only, no API calls.

Precedence, first match wins for the short-circuits:

1. no text but some payload (images, ...) -> 0.5
2. no text at all -> 0.1
3. tool output -> 0.45 (repetition is penalised by the pruner)
4. record requests tool calls -> 0.5 (kept so it can pair with its results)
5. short acknowledgment or greeting -> 0.1

Otherwise the score starts at BASELINE_SCORE, short text is penalised, and
each rule in SCORING_RULES (in order) can only raise it to the rule's
floor. Role adjustments are applied last.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from context_pruner.models.prune import ScoreBreakdown
from context_pruner.models.record import Record, SYSTEM_ROLE, TOOL_ROLE, USER_ROLE

MEDIA_SCORE = 0.5
EMPTY_SCORE = 0.1
TOOL_OUTPUT_SCORE = 0.45
TOOL_CALL_SCORE = 0.5
LOW_VALUE_SCORE = 0.1
BASELINE_SCORE = 0.4
SHORT_TEXT_LENGTH = 20
SHORT_TEXT_PENALTY = 0.15
SHORT_TEXT_MIN = 0.15
SYSTEM_FLOOR = 0.5
USER_BOOST = 0.1

# Low-value patterns -- short acks, greetings
LOW_VALUE_PATTERNS = (
    re.compile(
        r"(ok|okay|k|sure|thanks|thank you|got it|sounds good|yep|yes|no|nope|alright"
        r"|cool|nice|great|perfect|understood|ack|ty|thx|np|mhm|yup|ya|right)\.?",
        re.IGNORECASE | re.ASCII,
    ),
    re.compile(
        r"(hi|hello|hey|good morning|good afternoon|good evening|howdy|yo|sup)\.?",
        re.IGNORECASE | re.ASCII,
    ),
)

# High-value: decisions and preferences
DECISION_PATTERNS = (
    re.compile(r"\b(always|never|prefer|must|should not|don't ever|do not|use .+ instead)\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\b(decision|decided|let's go with|going with|settled on|the plan is)\b", re.IGNORECASE | re.ASCII),
    re.compile(r"\b(requirement|constraint|rule|convention|standard)\b", re.IGNORECASE | re.ASCII),
)

CODE_BLOCK = re.compile(r"```.*?```", re.DOTALL)
INLINE_CODE = re.compile(r"`[^`]+`")
INLINE_CODE_HEAVY_COUNT = 3

# Medium-high: errors and stack frames
ERROR_PATTERNS = (
    re.compile(
        r"\b(error|exception|traceback|stack trace|failed|failure|crash|panic|segfault)\b",
        re.IGNORECASE | re.ASCII,
    ),
    re.compile(r"at .+:\d+:\d+", re.ASCII),
    re.compile(r"^\s*(at|in|from) .+\.(ts|js|py|go|rs|java|rb|c|cpp|h):\d+", re.MULTILINE | re.ASCII),
)

# Medium: URLs and file paths like /foo/bar/baz
REFERENCE_PATTERNS = (
    re.compile(r"https?://\S+"),
    re.compile(r"(?:/[\w.-]+){2,}", re.ASCII),
)

LONG_TEXT_LENGTH = 500
VERY_LONG_TEXT_LENGTH = 2000

# Duplicate detection
REPETITION_PREFIX_CHARS = 200
REPETITION_LINES = 5
REPETITION_OVERLAP = 0.8
_NUMERIC_RUN = re.compile(r"[\d.]+", re.ASCII)


def _any_match(patterns: Sequence[re.Pattern[str]], text: str) -> bool:
    return any(p.search(text) for p in patterns)


@dataclass(frozen=True)
class ScoringRule:
    """A content rule that raises the running score to at least ``floor``."""

    name: str
    matches: Callable[[str], bool]
    floor: float


SCORING_RULES: tuple[ScoringRule, ...] = (
    ScoringRule("code-block", lambda text: CODE_BLOCK.search(text) is not None, 0.8),
    ScoringRule(
        "inline-code",
        lambda text: len(INLINE_CODE.findall(text)) >= INLINE_CODE_HEAVY_COUNT,
        0.65,
    ),
    ScoringRule("decision", lambda text: _any_match(DECISION_PATTERNS, text), 0.75),
    ScoringRule("error", lambda text: _any_match(ERROR_PATTERNS, text), 0.65),
    ScoringRule("reference", lambda text: _any_match(REFERENCE_PATTERNS, text), 0.55),
    ScoringRule("long", lambda text: len(text) > LONG_TEXT_LENGTH, 0.55),
    ScoringRule("very-long", lambda text: len(text) > VERY_LONG_TEXT_LENGTH, 0.65),
)


def is_low_value(text: str) -> bool:
    """True if trimmed text is just an acknowledgment or a greeting."""
    trimmed = text.strip()
    return any(p.fullmatch(trimmed) for p in LOW_VALUE_PATTERNS)


def score_breakdown(record: Record) -> ScoreBreakdown:
    """Score a record and report which rules fired, in order."""
    text = record.text

    if not text and record.has_payload:
        return ScoreBreakdown(MEDIA_SCORE, ("non-text",))
    if not text:
        return ScoreBreakdown(EMPTY_SCORE, ("empty",))
    if record.role == TOOL_ROLE:
        return ScoreBreakdown(TOOL_OUTPUT_SCORE, ("tool-output",))
    if record.tool_calls:
        return ScoreBreakdown(TOOL_CALL_SCORE, ("tool-call",))

    trimmed = text.strip()
    if is_low_value(trimmed):
        return ScoreBreakdown(LOW_VALUE_SCORE, ("low-value",))

    score = BASELINE_SCORE
    fired: list[str] = []

    if len(trimmed) < SHORT_TEXT_LENGTH and not CODE_BLOCK.search(trimmed):
        score = max(score - SHORT_TEXT_PENALTY, SHORT_TEXT_MIN)
        fired.append("short")

    for rule in SCORING_RULES:
        if rule.matches(text):
            score = max(score, rule.floor)
            fired.append(rule.name)

    if record.role == SYSTEM_ROLE:
        score = max(score, SYSTEM_FLOOR)
        fired.append("system")
    elif record.role == USER_ROLE:
        score = min(score + USER_BOOST, 1.0)
        fired.append("user")

    return ScoreBreakdown(min(max(score, 0.0), 1.0), tuple(fired))


def score_record(record: Record) -> float:
    """Importance of a single record in [0, 1].

    Deterministic and pure: depends only on the record itself, never on
    its position or neighbours.
    """
    return score_breakdown(record).score


def _normalized_head(text: str) -> set[str]:
    return {_NUMERIC_RUN.sub("N", line) for line in text.split("\n")[:REPETITION_LINES]}


def find_repetitive_tool_outputs(records: Sequence[Record]) -> set[int]:
    """Indices of tool outputs that near-duplicate the tool output before them.

    A later output is flagged when its first 200 characters equal the
    previous output's, or when more than 80% of the previous output's
    first 5 lines (numbers masked) reappear in it.
    """
    repetitive: set[int] = set()

    for i in range(1, len(records)):
        if not (records[i].is_tool_output and records[i - 1].is_tool_output):
            continue

        a = records[i - 1].text
        b = records[i].text
        if not a or not b:
            continue

        if a[:REPETITION_PREFIX_CHARS] == b[:REPETITION_PREFIX_CHARS]:
            repetitive.add(i)
            continue

        a_lines = _normalized_head(a)
        b_lines = _normalized_head(b)
        overlap = len(a_lines & b_lines)
        if a_lines and overlap / len(a_lines) > REPETITION_OVERLAP:
            repetitive.add(i)

    return repetitive
