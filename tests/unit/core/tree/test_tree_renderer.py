from __future__ import annotations

"""
Unit tests for the Tree Renderer.

Validates connector layout, tri-state markers and the collapsed-branch
summary.
"""

from menuselect.core.selection.engine import states_for
from menuselect.core.tree.renderer import render_forest


def test_render_all_open_with_markers(admin_forest) -> None:
    lines = render_forest(admin_forest, {2})

    assert lines == [
        "└── [-] Admin #1",
        "    ├── [ ] Roles #3",
        "    └── [x] Users #2",
    ]


def test_render_hides_ids_on_request(admin_forest) -> None:
    lines = render_forest(admin_forest, {1, 2, 3}, show_ids=False)
    assert lines[0] == "└── [x] Admin"


def test_render_collapsed_branch_shows_hidden_count(admin_forest) -> None:
    lines = render_forest(admin_forest, set(), expanded=set())
    assert lines == ["└── [ ] Admin #1 (+2 hidden)"]


def test_render_nested_prefixes(nested_forest) -> None:
    lines = render_forest(nested_forest, set(), show_ids=False)

    assert lines == [
        "├── [ ] Reports",
        "│   └── [ ] Monthly",
        "└── [ ] System",
        "    ├── [ ] Access",
        "    │   ├── [ ] Permissions",
        "    │   └── [ ] Role Menus",
        "    └── [ ] Settings",
    ]


def test_render_empty_forest() -> None:
    assert render_forest([], set()) == []


def test_render_pruned_forest_with_full_forest_states(admin_forest) -> None:
    pruned = [admin_forest[0].with_children((admin_forest[0].children[0],))]
    selection = {1, 3}

    assert render_forest(pruned, selection)[0] == "└── [x] Admin #1"

    states = states_for(admin_forest, selection)
    assert render_forest(pruned, selection, states=states)[0] == "└── [-] Admin #1"
