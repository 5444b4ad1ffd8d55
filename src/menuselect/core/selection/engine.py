from __future__ import annotations

"""
Tri-State Selection Engine.

Pure functions over a TreeNode and an immutable selection set. The
checked / indeterminate / unchecked status of a node is never stored: it is
recomputed from descendant coverage on every read, so the selection set
stays the single source of truth.

Caveat: when the node universe grows after a parent was fully checked, the
parent reads as indeterminate until the new children are selected too.
New children are never selected implicitly.
"""

import math
from typing import AbstractSet, Dict, FrozenSet, Iterable, List

from menuselect.core.tree.builder import iter_nodes
from menuselect.domain.node_models import (
    CheckState,
    Forest,
    NodeId,
    SelectionSet,
    SelectionSummary,
    TreeNode,
)

# -----------------------------------------------------------------------------
# PRIMITIVES
# -----------------------------------------------------------------------------

def descendant_ids(node: TreeNode) -> List[NodeId]:
    """
    Return the node's own id followed by every id in its subtree.

    Order is depth-first, own id first.
    """
    return [n.id for n in iter_nodes([node])]


def selection_state(node: TreeNode, selection: AbstractSet[NodeId]) -> CheckState:
    """
    Derive the tri-state status of a node from the selection set.

    Args:
        node: Node whose subtree coverage is measured.
        selection: Currently selected ids.

    Returns:
        CheckState: UNCHECKED if no id of the subtree is selected, CHECKED if
                    all are, INDETERMINATE otherwise. Leaves are never
                    INDETERMINATE.
    """
    ids = descendant_ids(node)
    covered = sum(1 for i in ids if i in selection)

    if covered == 0:
        return CheckState.UNCHECKED
    if covered == len(ids):
        return CheckState.CHECKED
    return CheckState.INDETERMINATE


def toggle(node: TreeNode, selection: AbstractSet[NodeId]) -> SelectionSet:
    """
    Flip a node and its whole subtree.

    A CHECKED node has every subtree id removed; an UNCHECKED or
    INDETERMINATE node has every subtree id added. Ancestors are never
    touched. The input set is left unchanged.

    Returns:
        SelectionSet: The next selection.
    """
    ids = descendant_ids(node)
    if selection_state(node, selection) is CheckState.CHECKED:
        return frozenset(selection).difference(ids)
    return frozenset(selection).union(ids)


def check(node: TreeNode, selection: AbstractSet[NodeId]) -> SelectionSet:
    """Select the node and its whole subtree, whatever its current state."""
    return frozenset(selection).union(descendant_ids(node))


def uncheck(node: TreeNode, selection: AbstractSet[NodeId]) -> SelectionSet:
    """Deselect the node and its whole subtree, whatever its current state."""
    return frozenset(selection).difference(descendant_ids(node))


def states_for(forest: Forest, selection: AbstractSet[NodeId]) -> Dict[NodeId, CheckState]:
    """Compute the CheckState of every node in the forest."""
    states: Dict[NodeId, CheckState] = {}
    for root in forest:
        _collect_states(root, selection, states)
    return states

# -----------------------------------------------------------------------------
# BULK OPERATIONS
# -----------------------------------------------------------------------------

def all_ids_in(forest: Forest) -> FrozenSet[NodeId]:
    """Collect every node id present in a (possibly pruned) forest."""
    return frozenset(n.id for n in iter_nodes(forest))


def select_all(all_ids: Iterable[NodeId]) -> SelectionSet:
    """Selection becomes the full id universe."""
    return frozenset(all_ids)


def deselect_all() -> SelectionSet:
    return frozenset()


def select_all_visible(selection: AbstractSet[NodeId], filtered_forest: Forest) -> SelectionSet:
    """Add every node of the visible forest, leaving hidden selections alone."""
    return frozenset(selection) | all_ids_in(filtered_forest)


def deselect_all_visible(selection: AbstractSet[NodeId], filtered_forest: Forest) -> SelectionSet:
    """Remove every node of the visible forest, leaving hidden selections alone."""
    return frozenset(selection) - all_ids_in(filtered_forest)

# -----------------------------------------------------------------------------
# DIFFING AND REPORTING
# -----------------------------------------------------------------------------

def sets_differ(a: Iterable[NodeId], b: Iterable[NodeId]) -> bool:
    """Order-independent inequality through the symmetric difference."""
    return bool(set(a) ^ set(b))


def selection_summary(selection: AbstractSet[NodeId], total: int) -> SelectionSummary:
    """
    Build the "N / M selected" counter.

    The percentage is rounded half up and the denominator clamped to one so
    an empty universe reports 0%.
    """
    selected = len(selection)
    percent = int(math.floor(selected / max(total, 1) * 100 + 0.5))
    return SelectionSummary(selected=selected, total=total, percent=percent)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _collect_states(
        node: TreeNode,
        selection: AbstractSet[NodeId],
        out: Dict[NodeId, CheckState],
) -> List[NodeId]:
    """Post-order walk that reuses child subtrees instead of re-walking them."""
    ids: List[NodeId] = [node.id]
    for child in node.children:
        ids.extend(_collect_states(child, selection, out))

    covered = sum(1 for i in ids if i in selection)
    if covered == 0:
        out[node.id] = CheckState.UNCHECKED
    elif covered == len(ids):
        out[node.id] = CheckState.CHECKED
    else:
        out[node.id] = CheckState.INDETERMINATE
    return ids
