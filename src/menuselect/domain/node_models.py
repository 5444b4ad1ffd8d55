from __future__ import annotations

"""
Menu Hierarchy Data Models.

Provides the flat record shape delivered by the menu API, the derived
recursive tree node, and the value objects produced by the selection and
search subsystems.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

from menuselect.domain.errors import RecordFormatError

NodeId = Union[int, str]
SelectionSet = FrozenSet[NodeId]
ExpansionSet = FrozenSet[NodeId]

# -----------------------------------------------------------------------------
# FLAT INPUT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class NodeRecord:
    """
    One entry of the flat, parent-referencing menu list.

    Attributes:
        id: Stable unique key of the node.
        name: Display label.
        level: Informational depth hint reported by the backend.
        parent_id: Lookup key of the parent record. None marks a root.
        path: Optional route of the menu entry.
        icon: Optional icon tag.
    """
    id: NodeId
    name: str
    level: int = 1
    parent_id: Optional[NodeId] = None
    path: Optional[str] = None
    icon: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> NodeRecord:
        """
        Build a record from a backend JSON object.

        Accepts both camelCase ('parentId') and snake_case ('parent_id')
        keys. Unknown keys such as 'order' or 'permission' are ignored.

        Args:
            payload: Decoded JSON object describing one menu entry.

        Returns:
            NodeRecord: The normalized record.

        Raises:
            RecordFormatError: If the payload is not an object or has no id.
        """
        if not isinstance(payload, Mapping):
            raise RecordFormatError(
                f"Menu record must be an object, received {type(payload).__name__}."
            )
        if payload.get("id") is None:
            raise RecordFormatError(f"Menu record without 'id': {dict(payload)!r}")

        parent_id = payload.get("parentId", payload.get("parent_id"))
        try:
            level = int(payload.get("level") or 1)
        except (TypeError, ValueError) as e:
            raise RecordFormatError(f"Invalid 'level' for menu {payload['id']!r}: {e}") from e

        return cls(
            id=payload["id"],
            name=str(payload.get("name") or ""),
            level=level,
            parent_id=parent_id,
            path=payload.get("path") or None,
            icon=payload.get("icon") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the backend's camelCase shape."""
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "parentId": self.parent_id,
            "path": self.path,
            "icon": self.icon,
        }


def records_from_payload(payload: Any) -> List[NodeRecord]:
    """
    Convert a decoded JSON list into NodeRecords.

    Raises:
        RecordFormatError: If the payload is not a list or an item is malformed.
    """
    if not isinstance(payload, list):
        raise RecordFormatError(
            f"Menu list must be a JSON array, received {type(payload).__name__}."
        )
    return [NodeRecord.from_dict(item) for item in payload]

# -----------------------------------------------------------------------------
# DERIVED TREE
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TreeNode:
    """
    A NodeRecord decorated with its ordered children.

    Children are owned by their parent; the forest owns every root.
    """
    record: NodeRecord
    children: Tuple[TreeNode, ...] = ()

    @property
    def id(self) -> NodeId:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def with_children(self, children: Tuple[TreeNode, ...]) -> TreeNode:
        """Return a copy of this node holding a different child tuple."""
        return TreeNode(record=self.record, children=children)


Forest = List[TreeNode]

# -----------------------------------------------------------------------------
# SELECTION AND SEARCH RESULTS
# -----------------------------------------------------------------------------

class CheckState(str, Enum):
    """Tri-state checkbox status derived from descendant coverage."""
    CHECKED = "checked"
    INDETERMINATE = "indeterminate"
    UNCHECKED = "unchecked"


@dataclass(frozen=True)
class FilterResult:
    """
    Outcome of a search over the forest.

    Attributes:
        pruned: Forest restricted to matches and their ancestor chains.
        must_expand: Ids the view must open to reveal every match. Every kept
                     node with kept children is listed, including matches
                     that also have matching descendants.
        match_ids: Ids whose name matched the query directly.
    """
    pruned: Forest
    must_expand: FrozenSet[NodeId] = field(default_factory=frozenset)
    match_ids: FrozenSet[NodeId] = field(default_factory=frozenset)

    @property
    def match_count(self) -> int:
        return len(self.match_ids)


@dataclass(frozen=True)
class SelectionSummary:
    """Counter shown under the selector: selected / total and a percentage."""
    selected: int
    total: int
    percent: int
