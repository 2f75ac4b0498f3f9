"""Tool call/result pairing.

A record that requests tool calls and the tool outputs answering them must
be kept or removed together. The relation is many-to-many: one assistant
record with parallel tool calls links to several results, and each result
links back to its call.
"""

from __future__ import annotations

from collections.abc import Sequence

from context_pruner.models.record import Record

ToolPairs = dict[int, set[int]]


def build_tool_pairs(records: Sequence[Record]) -> ToolPairs:
    """Build a symmetric adjacency map of paired positions.

    For every tool output carrying a ``tool_call_id``, the nearest earlier
    record whose tool calls contain that id is linked to it. Outputs with
    no matching call stay unpaired.
    """
    pairs: ToolPairs = {}

    def link(a: int, b: int) -> None:
        pairs.setdefault(a, set()).add(b)
        pairs.setdefault(b, set()).add(a)

    for i, record in enumerate(records):
        if not (record.is_tool_output and record.tool_call_id):
            continue
        for j in range(i - 1, -1, -1):
            if record.tool_call_id in records[j].tool_call_ids:
                link(i, j)
                break

    return pairs


def pair_cluster(pairs: ToolPairs, index: int) -> set[int]:
    """All positions transitively paired with ``index``, including itself."""
    cluster = {index}
    frontier = [index]
    while frontier:
        current = frontier.pop()
        for linked in pairs.get(current, ()):
            if linked not in cluster:
                cluster.add(linked)
                frontier.append(linked)
    return cluster
