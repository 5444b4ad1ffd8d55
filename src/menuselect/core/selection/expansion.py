from __future__ import annotations

"""
Expansion State Helpers.

The expansion set only drives which branches a view opens. These helpers
compute the usual defaults: every parent open after load, or everything
above a given depth.
"""

from typing import AbstractSet, List

from menuselect.domain.node_models import ExpansionSet, Forest, NodeId


def toggle_expanded(expanded: AbstractSet[NodeId], node_id: NodeId) -> ExpansionSet:
    """Open a closed node or close an open one."""
    if node_id in expanded:
        return frozenset(expanded) - {node_id}
    return frozenset(expanded) | {node_id}


def parent_ids(forest: Forest) -> ExpansionSet:
    """Ids of every node that has at least one child."""
    ids: List[NodeId] = []
    stack = list(forest)
    while stack:
        node = stack.pop()
        if node.children:
            ids.append(node.id)
            stack.extend(node.children)
    return frozenset(ids)


def expand_to_level(forest: Forest, depth: int) -> ExpansionSet:
    """
    Open every node whose depth is below `depth` (roots have depth 0).

    `expand_to_level(forest, 1)` opens the roots only.
    """
    ids: List[NodeId] = []
    level = list(forest)
    current = 0
    while level and current < depth:
        ids.extend(node.id for node in level)
        level = [child for node in level for child in node.children]
        current += 1
    return frozenset(ids)
