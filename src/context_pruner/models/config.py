"""Configuration models for context-pruner.

PrunerConfig holds the pruning policy: trigger size, target size, the
minimum-importance floor and the protected zone sizes. resolve_config()
is the policy owner -- it reads loose user input, ignores values that are
out of range, and clamps the rest into a mutually consistent set before
anything reaches the pruning engine.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class PrunerConfig(BaseModel):
    """Pruning policy.

    Attributes:
        max_messages: Record count above which auto-pruning triggers.
        target_messages: Record count pruning aims for.
        min_importance: Records scoring below this are pruned first.
        preserve_recent: Trailing records that are never pruned.
        preserve_first: Leading records that are never pruned.
        auto_prune: Whether the pre-turn hook prunes automatically.
    """

    model_config = ConfigDict(frozen=True)

    max_messages: int = 100
    target_messages: int = 60
    min_importance: float = 0.3
    preserve_recent: int = 10
    preserve_first: int = 3
    auto_prune: bool = True


# camelCase keys accepted from host plugin configs -> canonical field
_ALIASES: dict[str, str] = {
    "maxMessages": "max_messages",
    "targetMessages": "target_messages",
    "minImportance": "min_importance",
    "preserveRecent": "preserve_recent",
    "preserveFirst": "preserve_first",
    "autoPrune": "auto_prune",
}


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: object) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or (isinstance(value, float) and value.is_integer())


def resolve_config(raw: Mapping[str, Any] | None = None) -> PrunerConfig:
    """Build a consistent PrunerConfig from loose user input.

    Values of the wrong type or outside their valid range are ignored and
    the default is kept. Afterwards the settings are clamped so that
    ``max_messages > target_messages`` and the protected zones leave room
    under the target.

    Args:
        raw: Mapping of settings (snake_case or camelCase keys). Unknown
            keys are ignored. None returns the defaults.

    Returns:
        A validated, frozen PrunerConfig.
    """
    values: dict[str, Any] = PrunerConfig().model_dump()
    if not raw:
        return PrunerConfig(**values)

    data: dict[str, Any] = {}
    for key, value in raw.items():
        canonical = _ALIASES.get(key, key)
        # snake_case wins if both spellings are present
        if canonical in data and key != canonical:
            continue
        data[canonical] = value

    v = data.get("max_messages")
    if _is_int(v) and v >= 20:
        values["max_messages"] = int(v)
    v = data.get("target_messages")
    if _is_int(v) and v >= 10:
        values["target_messages"] = int(v)
    v = data.get("min_importance")
    if _is_number(v) and 0 <= v <= 1:
        values["min_importance"] = float(v)
    v = data.get("preserve_recent")
    if _is_int(v) and v >= 1:
        values["preserve_recent"] = int(v)
    v = data.get("preserve_first")
    if _is_int(v) and v >= 1:
        values["preserve_first"] = int(v)
    v = data.get("auto_prune")
    if isinstance(v, bool):
        values["auto_prune"] = v

    if values["max_messages"] <= values["target_messages"]:
        values["max_messages"] = values["target_messages"] + 40
        logger.debug("max_messages raised to %d", values["max_messages"])
    if values["preserve_recent"] >= values["target_messages"]:
        values["preserve_recent"] = max(1, values["target_messages"] - 5)
        logger.debug("preserve_recent lowered to %d", values["preserve_recent"])
    if values["preserve_first"] + values["preserve_recent"] >= values["target_messages"]:
        values["preserve_first"] = max(
            1, values["target_messages"] - values["preserve_recent"] - 5
        )
        logger.debug("preserve_first lowered to %d", values["preserve_first"])

    return PrunerConfig(**values)
