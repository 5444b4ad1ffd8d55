from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared menu fixtures (flat records, built forest) and an in-memory
   menu source used by the session and CLI tests.
"""

import os
import sys
from typing import Any, Dict, List, Optional, Sequence

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from menuselect.core.tree.builder import build_forest  # noqa: E402
from menuselect.domain.node_models import Forest, NodeId, NodeRecord  # noqa: E402


# -----------------------------------------------------------------------------
# Test Doubles
# -----------------------------------------------------------------------------
class FakeMenuSource:
    """
    In-memory menu source that records every persisted payload.

    Set `fail_fetch` / `fail_persist` to an exception instance to make the
    corresponding call raise it.
    """

    def __init__(
            self,
            records: List[NodeRecord],
            assignments: Optional[Dict[NodeId, List[NodeId]]] = None,
    ):
        self.records = records
        self.assignments: Dict[NodeId, List[NodeId]] = dict(assignments or {})
        self.persist_calls: List[Any] = []
        self.fail_fetch: Optional[Exception] = None
        self.fail_persist: Optional[Exception] = None

    def fetch_node_universe(self) -> List[NodeRecord]:
        if self.fail_fetch is not None:
            raise self.fail_fetch
        return self.records

    def fetch_baseline_selection(self, scope_key: NodeId) -> List[NodeId]:
        if self.fail_fetch is not None:
            raise self.fail_fetch
        return list(self.assignments.get(scope_key, []))

    def persist_selection(self, scope_key: NodeId, ids: Sequence[NodeId]) -> None:
        self.persist_calls.append((scope_key, list(ids)))
        if self.fail_persist is not None:
            raise self.fail_persist
        self.assignments[scope_key] = list(ids)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def admin_records() -> List[NodeRecord]:
    """
    The three-node Admin tree: Admin(1) with Users(2) and Roles(3).

    Returns:
        List[NodeRecord]: Flat records in backend order.
    """
    return [
        NodeRecord(id=1, name="Admin", parent_id=None),
        NodeRecord(id=2, name="Users", parent_id=1, level=2),
        NodeRecord(id=3, name="Roles", parent_id=1, level=2),
    ]


@pytest.fixture
def admin_forest(admin_records: List[NodeRecord]) -> Forest:
    return build_forest(admin_records)


@pytest.fixture
def nested_records() -> List[NodeRecord]:
    """
    A two-root, three-level menu tree.

    System(10)
    ├── Access(11)
    │   ├── Permissions(12)
    │   └── Role Menus(13)
    └── Settings(14)
    Reports(20)
    └── Monthly(21)
    """
    return [
        NodeRecord(id=20, name="Reports"),
        NodeRecord(id=10, name="System"),
        NodeRecord(id=14, name="Settings", parent_id=10, level=2),
        NodeRecord(id=11, name="Access", parent_id=10, level=2),
        NodeRecord(id=13, name="Role Menus", parent_id=11, level=3),
        NodeRecord(id=12, name="Permissions", parent_id=11, level=3),
        NodeRecord(id=21, name="Monthly", parent_id=20, level=2),
    ]


@pytest.fixture
def nested_forest(nested_records: List[NodeRecord]) -> Forest:
    return build_forest(nested_records)


@pytest.fixture
def fake_source(admin_records: List[NodeRecord]) -> FakeMenuSource:
    return FakeMenuSource(admin_records, {"admin": [2, 3]})


@pytest.fixture
def source_factory():
    """Expose the FakeMenuSource class to tests that need custom data."""
    return FakeMenuSource
