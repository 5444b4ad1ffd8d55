from __future__ import annotations

"""
Tree Renderer.

Converts a forest into ASCII lines with tri-state checkbox markers, for
the CLI and for log previews. Collapsed branches are summarized instead of
walked.
"""

from typing import AbstractSet, Dict, List, Optional, Sequence

from menuselect.core.selection.engine import states_for
from menuselect.domain.node_models import CheckState, Forest, NodeId, TreeNode

MARKERS: Dict[CheckState, str] = {
    CheckState.CHECKED: "[x]",
    CheckState.INDETERMINATE: "[-]",
    CheckState.UNCHECKED: "[ ]",
}

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_forest(
        forest: Forest,
        selection: AbstractSet[NodeId],
        expanded: Optional[AbstractSet[NodeId]] = None,
        show_ids: bool = True,
        states: Optional[Dict[NodeId, CheckState]] = None,
) -> List[str]:
    """
    Render the forest as a list of text lines.

    Uses standard connectors (├──, └──). When `expanded` is given, children
    of nodes outside it are replaced by a "(+N hidden)" suffix.

    Args:
        forest: Forest to render (full or pruned).
        selection: Selected ids driving the markers.
        expanded: Ids of open nodes. None renders everything open.
        show_ids: Append the node id to each label.
        states: Precomputed markers keyed by id. Pass the states of the full
                forest when rendering a pruned one, so a kept parent shows
                its real coverage rather than that of its visible children.

    Returns:
        List[str]: Visual lines.
    """
    if states is None:
        states = states_for(forest, selection)
    lines: List[str] = []
    _render_level(forest, states, expanded, show_ids, lines, prefix="")
    return lines

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _render_level(
        nodes: Sequence[TreeNode],
        states: Dict[NodeId, CheckState],
        expanded: Optional[AbstractSet[NodeId]],
        show_ids: bool,
        lines: List[str],
        prefix: str,
) -> None:
    total = len(nodes)
    for i, node in enumerate(nodes):
        is_last = (i == total - 1)
        connector = "└── " if is_last else "├── "
        is_open = expanded is None or node.id in expanded

        label = _label(node, states[node.id], show_ids)
        if node.children and not is_open:
            label += f" (+{len(node.children)} hidden)"
        lines.append(f"{prefix}{connector}{label}")

        if node.children and is_open:
            new_prefix = prefix + ("    " if is_last else "│   ")
            _render_level(node.children, states, expanded, show_ids, lines, new_prefix)


def _label(node: TreeNode, state: CheckState, show_ids: bool) -> str:
    text = f"{MARKERS[state]} {node.name}"
    if show_ids:
        text += f" #{node.id}"
    return text
