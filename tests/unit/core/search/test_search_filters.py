from __future__ import annotations

"""
Unit tests for the Menu Tree Search.

Verifies pruning with ancestor preservation, the must_expand report and
the empty-query short circuit.
"""

from menuselect.core.search.filters import filter_forest, matches_query
from menuselect.core.tree.builder import ancestor_ids, index_forest, iter_nodes


def test_empty_query_returns_forest_untouched(admin_forest) -> None:
    result = filter_forest(admin_forest, "")

    assert result.pruned is admin_forest
    assert result.must_expand == frozenset()
    assert result.match_count == 0


def test_query_keeps_match_and_ancestor_path(admin_forest) -> None:
    """Searching 'Role' leaves Admin -> Roles and opens Admin."""
    result = filter_forest(admin_forest, "Role")

    assert len(result.pruned) == 1
    admin = result.pruned[0]
    assert admin.id == 1
    assert [c.id for c in admin.children] == [3]
    assert 1 in result.must_expand
    assert result.match_ids == frozenset({3})


def test_query_is_case_insensitive(admin_forest) -> None:
    result = filter_forest(admin_forest, "uSeRs")
    assert result.match_ids == frozenset({2})


def test_query_without_match_yields_empty_forest(admin_forest) -> None:
    result = filter_forest(admin_forest, "billing")
    assert result.pruned == []
    assert result.must_expand == frozenset()


def test_every_ancestor_of_a_match_is_kept(nested_forest) -> None:
    result = filter_forest(nested_forest, "menu")
    kept = {n.id for n in iter_nodes(result.pruned)}

    assert result.match_ids == frozenset({13})
    for match in result.match_ids:
        assert set(ancestor_ids(nested_forest, match)) <= kept
    assert kept == {10, 11, 13}
    assert result.must_expand == frozenset({10, 11})


def test_matching_parent_keeps_only_matching_children(nested_forest) -> None:
    result = filter_forest(nested_forest, "s")
    index = index_forest(result.pruned)

    assert [c.id for c in index[10].children] == [11, 14]
    assert 21 not in index


def test_matching_parent_with_matching_children_is_expanded(nested_forest) -> None:
    result = filter_forest(nested_forest, "s")

    assert {10, 11} <= result.match_ids
    assert {10, 11} <= result.must_expand
    assert 14 not in result.must_expand


def test_filtering_leaves_source_forest_intact(nested_forest) -> None:
    before = [n.id for n in iter_nodes(nested_forest)]
    filter_forest(nested_forest, "monthly")
    assert [n.id for n in iter_nodes(nested_forest)] == before


def test_matches_query_helper() -> None:
    assert matches_query("Role Menus", "") is True
    assert matches_query("Role Menus", "MENU") is True
    assert matches_query("Role Menus", "user") is False
