from __future__ import annotations

"""
Unit tests for the Menu Tree Builder.

Verifies:
1. Parent/child assembly from the flat record list.
2. Name ordering (case and accent insensitive, stable on ties).
3. Orphan and cycle tolerance (warning, never an exception).
4. Identity-based memoization of the forest.
"""

import warnings

import pytest

from menuselect.core.tree.builder import (
    ForestCache,
    ancestor_ids,
    build_forest,
    index_forest,
    iter_nodes,
    parent_map,
)
from menuselect.domain.errors import OrphanRecordWarning
from menuselect.domain.node_models import NodeRecord


def _names(nodes):
    return [n.name for n in nodes]


# -----------------------------------------------------------------------------
# ASSEMBLY
# -----------------------------------------------------------------------------

def test_build_forest_groups_children_under_parent(admin_forest) -> None:
    """Admin is the single root and owns Users and Roles."""
    assert len(admin_forest) == 1
    root = admin_forest[0]
    assert root.id == 1
    assert sorted(c.id for c in root.children) == [2, 3]
    assert all(c.is_leaf for c in root.children)


def test_build_forest_sorts_siblings_by_name(nested_forest) -> None:
    assert _names(nested_forest) == ["Reports", "System"]
    system = nested_forest[1]
    assert _names(system.children) == ["Access", "Settings"]
    assert _names(system.children[0].children) == ["Permissions", "Role Menus"]


def test_sorting_ignores_case_and_accents() -> None:
    records = [
        NodeRecord(id=1, name="zeta"),
        NodeRecord(id=2, name="Éclair"),
        NodeRecord(id=3, name="alpha"),
        NodeRecord(id=4, name="Beta"),
    ]
    assert _names(build_forest(records)) == ["alpha", "Beta", "Éclair", "zeta"]


def test_sorting_keeps_input_order_for_identical_names() -> None:
    records = [
        NodeRecord(id="b", name="Same"),
        NodeRecord(id="a", name="Same"),
    ]
    assert [n.id for n in build_forest(records)] == ["b", "a"]


def test_empty_input_yields_empty_forest() -> None:
    assert build_forest([]) == []


def test_string_ids_are_supported() -> None:
    records = [
        NodeRecord(id="root", name="Root"),
        NodeRecord(id="leaf", name="Leaf", parent_id="root"),
    ]
    forest = build_forest(records)
    assert forest[0].children[0].id == "leaf"


# -----------------------------------------------------------------------------
# ORPHANS AND CYCLES
# -----------------------------------------------------------------------------

def test_orphan_is_excluded_with_warning() -> None:
    records = [
        NodeRecord(id=1, name="Admin"),
        NodeRecord(id=9, name="Lost", parent_id=404),
    ]
    with pytest.warns(OrphanRecordWarning, match="parent not found"):
        forest = build_forest(records)

    assert [n.id for n in iter_nodes(forest)] == [1]


def test_orphan_is_promoted_to_root_on_request() -> None:
    records = [
        NodeRecord(id=1, name="Admin"),
        NodeRecord(id=9, name="Lost", parent_id=404),
    ]
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        forest = build_forest(records, promote_orphans=True)

    assert _names(forest) == ["Admin", "Lost"]


def test_parent_cycle_is_reported_not_raised() -> None:
    records = [
        NodeRecord(id=1, name="Root"),
        NodeRecord(id=2, name="A", parent_id=3),
        NodeRecord(id=3, name="B", parent_id=2),
    ]
    with pytest.warns(OrphanRecordWarning, match="parent cycle"):
        forest = build_forest(records)

    assert [n.id for n in iter_nodes(forest)] == [1]


# -----------------------------------------------------------------------------
# TRAVERSAL HELPERS
# -----------------------------------------------------------------------------

def test_iter_nodes_visits_parents_before_children(nested_forest) -> None:
    order = [n.id for n in iter_nodes(nested_forest)]
    assert order == [20, 21, 10, 11, 12, 13, 14]


def test_index_and_parent_map(nested_forest) -> None:
    index = index_forest(nested_forest)
    assert set(index) == {10, 11, 12, 13, 14, 20, 21}
    parents = parent_map(nested_forest)
    assert parents[10] is None
    assert parents[13] == 11
    assert parents[21] == 20


def test_ancestor_ids_nearest_first(nested_forest) -> None:
    assert ancestor_ids(nested_forest, 13) == [11, 10]
    assert ancestor_ids(nested_forest, 10) == []
    assert ancestor_ids(nested_forest, 999) == []


# -----------------------------------------------------------------------------
# MEMOIZATION
# -----------------------------------------------------------------------------

def test_forest_cache_rebuilds_only_on_identity_change(admin_records) -> None:
    cache = ForestCache()

    first = cache.get(admin_records)
    second = cache.get(admin_records)
    assert first is second
    assert cache.builds == 1

    third = cache.get(list(admin_records))
    assert third is not first
    assert cache.builds == 2


def test_forest_cache_clear_forces_rebuild(admin_records) -> None:
    cache = ForestCache()
    cache.get(admin_records)
    cache.clear()
    cache.get(admin_records)
    assert cache.builds == 2
