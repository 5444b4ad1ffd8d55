from __future__ import annotations

"""
Menu Tree Search.

Prunes the forest down to nodes whose name contains the query plus the
ancestor chain of each match, and reports which nodes the view must open
to reveal them. Filtering works on copies; the source forest and any
selection set are left untouched.
"""

import logging
from typing import List, Sequence, Set

from menuselect.domain.node_models import FilterResult, Forest, NodeId, TreeNode

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def matches_query(name: str, query: str) -> bool:
    """Case-insensitive substring test. An empty query matches everything."""
    if not query:
        return True
    return query.casefold() in (name or "").casefold()


def filter_forest(forest: Forest, query: str) -> FilterResult:
    """
    Restrict the forest to matching nodes and their ancestors.

    A node is kept when its name matches or when at least one descendant
    matches; the kept copy only carries the kept children. Every kept node
    with kept children is listed in `must_expand`, which covers each
    ancestor retained purely as a path marker.

    Args:
        forest: Source forest.
        query: Search term. Empty short-circuits to the untouched forest.

    Returns:
        FilterResult: Pruned forest, ids to expand and direct matches.
    """
    if not query:
        return FilterResult(pruned=forest)

    must_expand: Set[NodeId] = set()
    matches: Set[NodeId] = set()
    pruned = _filter_nodes(forest, query.casefold(), must_expand, matches)

    logger.debug(
        f"Search '{query}': {len(matches)} match(es), {len(pruned)} root(s) visible."
    )
    return FilterResult(
        pruned=pruned,
        must_expand=frozenset(must_expand),
        match_ids=frozenset(matches),
    )

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _filter_nodes(
        nodes: Sequence[TreeNode],
        folded_query: str,
        must_expand: Set[NodeId],
        matches: Set[NodeId],
) -> List[TreeNode]:
    kept: List[TreeNode] = []
    for node in nodes:
        is_match = folded_query in (node.name or "").casefold()
        children = _filter_nodes(node.children, folded_query, must_expand, matches)

        if not is_match and not children:
            continue
        if is_match:
            matches.add(node.id)
        if children:
            must_expand.add(node.id)
        kept.append(node.with_children(tuple(children)))
    return kept
