from __future__ import annotations

"""
Menu Tree Builder.

Turns the flat, parent-referencing record list delivered by the menu API
into an ordered forest. Unresolvable records are tolerated: they are left
out (or promoted to roots on request) and reported as warnings instead of
aborting the build.
"""

import logging
import unicodedata
import warnings
from collections import defaultdict
from typing import Dict, FrozenSet, Iterator, List, Optional, Sequence, Tuple

from menuselect.domain.errors import OrphanRecordWarning
from menuselect.domain.node_models import Forest, NodeId, NodeRecord, TreeNode

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def build_forest(
        records: Sequence[NodeRecord],
        *,
        promote_orphans: bool = False,
) -> Forest:
    """
    Build the forest of TreeNodes from a flat record list.

    Roots are the records without parent. Children of a node are exactly the
    records whose parent_id equals its id, sorted by name with a
    case- and accent-insensitive collation. Equal names keep list order.

    Args:
        records: Flat list of menu records.
        promote_orphans: Treat records whose parent_id does not resolve as
                         roots instead of dropping them.

    Returns:
        Forest: Ordered list of root nodes.
    """
    known_ids = {r.id for r in records}
    by_parent: Dict[NodeId, List[NodeRecord]] = defaultdict(list)
    roots: List[NodeRecord] = []
    orphans: List[NodeRecord] = []

    # 1. Grouping pass (preserves input order inside each group)
    for record in records:
        if record.parent_id is None:
            roots.append(record)
        elif record.parent_id in known_ids:
            by_parent[record.parent_id].append(record)
        elif promote_orphans:
            roots.append(record)
        else:
            orphans.append(record)

    # 2. Recursive assembly from the roots
    reached: set = set()
    forest = [
        _assemble(record, by_parent, reached, frozenset())
        for record in _sorted_by_name(roots)
    ]

    # 3. Diagnostics for everything the roots never reached
    if orphans:
        _report_unreachable(
            "parent not found",
            [r.id for r in orphans],
        )
    orphan_ids = {r.id for r in orphans}
    trapped = [r.id for r in records if r.id not in reached and r.id not in orphan_ids]
    if trapped:
        _report_unreachable("parent cycle", trapped)

    logger.debug(f"Forest built: {len(records)} records, {len(forest)} roots.")
    return forest


def iter_nodes(forest: Forest) -> Iterator[TreeNode]:
    """Yield every node of the forest depth-first, parents before children."""
    stack: List[TreeNode] = list(reversed(forest))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def index_forest(forest: Forest) -> Dict[NodeId, TreeNode]:
    """Map every node id in the forest to its TreeNode."""
    return {node.id: node for node in iter_nodes(forest)}


def parent_map(forest: Forest) -> Dict[NodeId, Optional[NodeId]]:
    """Map every node id to the id of its parent in the forest (None for roots)."""
    parents: Dict[NodeId, Optional[NodeId]] = {root.id: None for root in forest}
    for node in iter_nodes(forest):
        for child in node.children:
            parents[child.id] = node.id
    return parents


def ancestor_ids(forest: Forest, node_id: NodeId) -> List[NodeId]:
    """
    Return the ancestor chain of a node, nearest parent first.

    Returns an empty list for roots and for ids not present in the forest.
    """
    parents = parent_map(forest)
    chain: List[NodeId] = []
    current = parents.get(node_id)
    while current is not None:
        chain.append(current)
        current = parents.get(current)
    return chain

# -----------------------------------------------------------------------------
# MEMOIZATION
# -----------------------------------------------------------------------------

class ForestCache:
    """
    Keeps the last built forest and reuses it while the same list is passed.

    Identity, not equality, decides: handing over a new list object always
    triggers a rebuild, mutating the cached list in place does not.
    """

    def __init__(self, *, promote_orphans: bool = False) -> None:
        self._promote_orphans = promote_orphans
        self._records: Optional[Sequence[NodeRecord]] = None
        self._forest: Forest = []
        self.builds = 0

    def get(self, records: Sequence[NodeRecord]) -> Forest:
        """Return the forest for `records`, rebuilding only on identity change."""
        if records is not self._records:
            self._forest = build_forest(records, promote_orphans=self._promote_orphans)
            self._records = records
            self.builds += 1
        return self._forest

    def clear(self) -> None:
        self._records = None
        self._forest = []

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _assemble(
        record: NodeRecord,
        by_parent: Dict[NodeId, List[NodeRecord]],
        reached: set,
        path: FrozenSet[NodeId],
) -> TreeNode:
    """Recursively attach children, refusing to re-enter an id already on the path."""
    reached.add(record.id)
    inner_path = path | {record.id}

    children: List[TreeNode] = []
    for child in _sorted_by_name(by_parent.get(record.id, [])):
        if child.id in inner_path:
            logger.warning(f"Tree: Skipping menu {child.id!r} re-entering its own ancestry.")
            continue
        children.append(_assemble(child, by_parent, reached, inner_path))

    return TreeNode(record=record, children=tuple(children))


def _sorted_by_name(records: List[NodeRecord]) -> List[NodeRecord]:
    return sorted(records, key=lambda r: _collation_key(r.name))


def _collation_key(name: Optional[str]) -> Tuple[str, str, str]:
    """
    Approximate a locale collation without depending on the process locale.

    Primary: accents stripped, case folded. Secondary: case folded.
    Tertiary: the raw label.
    """
    raw = name or ""
    decomposed = unicodedata.normalize("NFKD", raw)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), raw.casefold(), raw


def _report_unreachable(reason: str, ids: List[NodeId]) -> None:
    msg = f"{len(ids)} menu record(s) excluded from the tree ({reason}): {ids!r}"
    logger.warning(f"Tree: {msg}")
    warnings.warn(msg, OrphanRecordWarning, stacklevel=3)
