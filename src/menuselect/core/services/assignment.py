from __future__ import annotations

"""
Role Menu Assignment Session.

Orchestrates one editing session of a scope's (role's) menu assignment:
concurrent loading of the menu universe and the currently assigned ids,
tri-state editing through the selection engine, dirty tracking against the
last persisted baseline, and replace-all persistence.

Each controller instance owns its forest, selection, baseline, expansion
set and undo history. A generation counter guards against late results:
once a session is discarded, any load or save that completes afterwards
is ignored.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Protocol, Sequence

from menuselect.core.search.filters import filter_forest
from menuselect.core.selection import engine
from menuselect.core.selection.expansion import expand_to_level, parent_ids, toggle_expanded
from menuselect.core.tree.builder import ForestCache, ancestor_ids, index_forest
from menuselect.core.tree.renderer import render_forest
from menuselect.domain.errors import (
    EmptySelectionError,
    FetchFailure,
    PersistFailure,
    SessionStateError,
    UnknownNodeError,
)
from menuselect.domain.node_models import (
    CheckState,
    ExpansionSet,
    FilterResult,
    Forest,
    NodeId,
    NodeRecord,
    SelectionSet,
    SelectionSummary,
    TreeNode,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


# ==============================================================================
# COLLABORATOR CONTRACT
# ==============================================================================

class MenuSource(Protocol):
    """Remote (or local) provider of menus and per-scope assignments."""

    def fetch_node_universe(self) -> List[NodeRecord]:
        ...

    def fetch_baseline_selection(self, scope_key: NodeId) -> List[NodeId]:
        ...

    def persist_selection(self, scope_key: NodeId, ids: Sequence[NodeId]) -> None:
        ...


class SessionState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"
    DISCARDED = "discarded"


# ==============================================================================
# SESSION CONTROLLER
# ==============================================================================

class AssignmentController:
    """
    Editing session for the menus assigned to one scope.

    Lifecycle: LOADING -> READY -> SAVING -> READY, or DISCARDED at any time.
    """

    def __init__(
            self,
            source: MenuSource,
            scope_key: NodeId,
            *,
            readonly: bool = False,
            promote_orphans: bool = False,
            history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        """
        Args:
            source: Provider of the node universe, baseline and persistence.
            scope_key: Identifier of the scope being edited (e.g. a role id).
            readonly: Reject selection edits and saves.
            promote_orphans: Show records with an unknown parent as roots.
            history_limit: Maximum number of undo steps kept.
        """
        self.source = source
        self.scope_key = scope_key
        self.readonly = readonly
        self.history_limit = history_limit
        self.last_error: Optional[Exception] = None

        self._state = SessionState.LOADING
        self._generation = 0
        self._forest_cache = ForestCache(promote_orphans=promote_orphans)

        self._records: List[NodeRecord] = []
        self._forest: Forest = []
        self._index: Dict[NodeId, TreeNode] = {}
        self._universe: FrozenSet[NodeId] = frozenset()

        self._baseline: SelectionSet = frozenset()
        self._selection: SelectionSet = frozenset()
        self._expanded: ExpansionSet = frozenset()
        self._query = ""
        self._filter = FilterResult(pruned=[])

        self._undo: List[SelectionSet] = []
        self._redo: List[SelectionSet] = []

    # -------------------------------------------------------------------------
    # READ-ONLY VIEW OF THE SESSION
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def records(self) -> List[NodeRecord]:
        return self._records

    @property
    def forest(self) -> Forest:
        return self._forest

    @property
    def visible_forest(self) -> Forest:
        """The forest as currently filtered by the search query."""
        return self._filter.pruned

    @property
    def filter_result(self) -> FilterResult:
        return self._filter

    @property
    def query(self) -> str:
        return self._query

    @property
    def selection(self) -> SelectionSet:
        return self._selection

    @property
    def baseline(self) -> SelectionSet:
        return self._baseline

    @property
    def expanded(self) -> ExpansionSet:
        return self._expanded

    @property
    def is_dirty(self) -> bool:
        return engine.sets_differ(self._selection, self._baseline)

    @property
    def summary(self) -> SelectionSummary:
        return engine.selection_summary(self._selection, len(self._records))

    @property
    def can_save(self) -> bool:
        return (
            self._state is SessionState.READY
            and not self.readonly
            and bool(self._selection)
            and self.is_dirty
        )

    def node(self, node_id: NodeId) -> TreeNode:
        """Look up a node of the forest by id."""
        try:
            return self._index[node_id]
        except KeyError:
            raise UnknownNodeError(node_id) from None

    def state_of(self, node_id: NodeId) -> CheckState:
        return engine.selection_state(self.node(node_id), self._selection)

    def ancestors_of(self, node_id: NodeId) -> List[NodeId]:
        self.node(node_id)
        return ancestor_ids(self._forest, node_id)

    def render(self, show_ids: bool = True) -> List[str]:
        """
        Text rendering of the visible forest honouring the expansion set.

        Markers are measured on the full forest, so they agree with
        state_of() and toggle() while a search hides part of a subtree.
        """
        states = engine.states_for(self._forest, self._selection)
        return render_forest(
            self.visible_forest, self._selection, self._expanded, show_ids, states=states
        )

    # -------------------------------------------------------------------------
    # LOADING
    # -------------------------------------------------------------------------

    def load(self) -> bool:
        """
        Fetch the node universe and the baseline selection concurrently.

        On success the baseline is snapshotted, the working selection reset
        to it and every parent node expanded.

        Returns:
            bool: True when applied, False when the session was discarded
                  while the fetches were in flight.

        Raises:
            FetchFailure: If either fetch fails. The session stays LOADING.
            SessionStateError: If the session is saving or discarded.
        """
        if self._state in (SessionState.SAVING, SessionState.DISCARDED):
            raise SessionStateError(f"Cannot load while session is {self._state.value}.")

        generation = self._generation
        self._state = SessionState.LOADING
        logger.info(f"Session: Loading menus for scope {self.scope_key!r}...")

        try:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="MenuFetch") as executor:
                universe_future = executor.submit(self.source.fetch_node_universe)
                baseline_future = executor.submit(
                    self.source.fetch_baseline_selection, self.scope_key
                )
                records = universe_future.result()
                baseline_ids = baseline_future.result()

        except Exception as e:
            if generation != self._generation:
                logger.info("Session: Load failed after discard; result ignored.")
                return False
            failure = e if isinstance(e, FetchFailure) else FetchFailure(f"Failed to load menus: {e}")
            self.last_error = failure
            logger.error(f"Session: Load failed for scope {self.scope_key!r}: {failure}")
            if failure is e:
                raise
            raise failure from e

        if generation != self._generation:
            logger.info("Session: Load completed after discard; result ignored.")
            return False

        self._apply_loaded(records, baseline_ids)
        return True

    # -------------------------------------------------------------------------
    # SELECTION EDITING
    # -------------------------------------------------------------------------

    def toggle(self, node_id: NodeId) -> SelectionSet:
        """Flip a node and its whole subtree."""
        self._require_ready()
        return self._commit(engine.toggle(self.node(node_id), self._selection))

    def check(self, node_id: NodeId) -> SelectionSet:
        """Force a node and its subtree to CHECKED."""
        self._require_ready()
        return self._commit(engine.check(self.node(node_id), self._selection))

    def uncheck(self, node_id: NodeId) -> SelectionSet:
        """Force a node and its subtree to UNCHECKED."""
        self._require_ready()
        return self._commit(engine.uncheck(self.node(node_id), self._selection))

    def select_all(self) -> SelectionSet:
        self._require_ready()
        return self._commit(engine.select_all(self._universe))

    def deselect_all(self) -> SelectionSet:
        self._require_ready()
        return self._commit(engine.deselect_all())

    def select_all_visible(self) -> SelectionSet:
        """Select everything the current search shows; hidden selections stay."""
        self._require_ready()
        return self._commit(engine.select_all_visible(self._selection, self.visible_forest))

    def deselect_all_visible(self) -> SelectionSet:
        """Clear everything the current search shows; hidden selections stay."""
        self._require_ready()
        return self._commit(engine.deselect_all_visible(self._selection, self.visible_forest))

    def cancel(self) -> SelectionSet:
        """Drop unsaved edits: the selection returns to the baseline."""
        self._require_ready()
        self.last_error = None
        return self._commit(self._baseline)

    def undo(self) -> bool:
        self._require_ready()
        if self.readonly or not self._undo:
            return False
        self._redo.append(self._selection)
        self._selection = self._undo.pop()
        return True

    def redo(self) -> bool:
        self._require_ready()
        if self.readonly or not self._redo:
            return False
        self._undo.append(self._selection)
        self._selection = self._redo.pop()
        return True

    # -------------------------------------------------------------------------
    # SEARCH AND EXPANSION
    # -------------------------------------------------------------------------

    def set_query(self, query: str) -> FilterResult:
        """
        Filter the visible forest and open the path to every match.

        The selection is never touched, including ids the filter hides.
        """
        self._require_ready()
        self._query = query or ""
        self._filter = filter_forest(self._forest, self._query)
        if self._query:
            self._expanded = self._expanded | self._filter.must_expand
        return self._filter

    def toggle_expanded(self, node_id: NodeId) -> ExpansionSet:
        self._require_ready()
        self.node(node_id)
        self._expanded = toggle_expanded(self._expanded, node_id)
        return self._expanded

    def expand_all(self) -> ExpansionSet:
        self._require_ready()
        self._expanded = parent_ids(self._forest)
        return self._expanded

    def collapse_all(self) -> ExpansionSet:
        self._require_ready()
        self._expanded = frozenset()
        return self._expanded

    def expand_to_level(self, depth: int) -> ExpansionSet:
        self._require_ready()
        self._expanded = expand_to_level(self._forest, depth)
        return self._expanded

    # -------------------------------------------------------------------------
    # PERSISTENCE
    # -------------------------------------------------------------------------

    def save(self) -> bool:
        """
        Replace the remote assignment with the whole current selection.

        Returns:
            bool: True when persisted, False when the session was discarded
                  before the call returned.

        Raises:
            EmptySelectionError: Nothing selected; the source is not called.
            PersistFailure: The source rejected the call. The unsaved
                            selection is kept and the session is READY.
            SessionStateError: Not READY, or the session is read-only.
        """
        self._require_ready()
        if self.readonly:
            raise SessionStateError("Read-only session cannot be saved.")
        if not self._selection:
            logger.warning(f"Session: Save blocked for scope {self.scope_key!r}: empty selection.")
            raise EmptySelectionError()

        generation = self._generation
        payload = _sorted_ids(self._selection)
        self._state = SessionState.SAVING
        logger.info(f"Session: Saving {len(payload)} menu(s) for scope {self.scope_key!r}...")

        try:
            self.source.persist_selection(self.scope_key, payload)
        except Exception as e:
            if generation != self._generation:
                logger.info("Session: Save failed after discard; result ignored.")
                return False
            self._state = SessionState.READY
            failure = e if isinstance(e, PersistFailure) else PersistFailure(f"Failed to assign menus: {e}")
            self.last_error = failure
            logger.error(f"Session: Save failed for scope {self.scope_key!r}: {failure}")
            if failure is e:
                raise
            raise failure from e

        if generation != self._generation:
            logger.info("Session: Save completed after discard; result ignored.")
            return False

        self._baseline = frozenset(payload)
        self._state = SessionState.READY
        self.last_error = None
        logger.info(f"Session: Scope {self.scope_key!r} saved.")
        return True

    def discard(self) -> None:
        """
        Abandon the session. In-flight results arriving later are ignored.
        """
        self._generation += 1
        self._state = SessionState.DISCARDED
        self._forest_cache.clear()
        self._records = []
        self._forest = []
        self._index = {}
        self._universe = frozenset()
        self._baseline = frozenset()
        self._selection = frozenset()
        self._expanded = frozenset()
        self._filter = FilterResult(pruned=[])
        self._undo.clear()
        self._redo.clear()
        logger.debug(f"Session: Scope {self.scope_key!r} discarded.")

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _apply_loaded(self, records: List[NodeRecord], baseline_ids: Sequence[NodeId]) -> None:
        self._records = records
        self._forest = self._forest_cache.get(records)
        self._index = index_forest(self._forest)
        self._universe = frozenset(r.id for r in records)

        unknown = [i for i in baseline_ids if i not in self._universe]
        if unknown:
            logger.warning(
                f"Session: Ignoring {len(unknown)} assigned id(s) missing from the menu list: {unknown!r}"
            )

        self._baseline = frozenset(i for i in baseline_ids if i in self._universe)
        self._selection = self._baseline
        self._expanded = parent_ids(self._forest)
        self._query = ""
        self._filter = FilterResult(pruned=self._forest)
        self._undo.clear()
        self._redo.clear()
        self.last_error = None
        self._state = SessionState.READY

        logger.info(
            f"Session: Scope {self.scope_key!r} ready "
            f"({len(records)} menus, {len(self._baseline)} assigned)."
        )

    def _commit(self, new_selection: SelectionSet) -> SelectionSet:
        if self.readonly:
            logger.debug("Session: Read-only; selection change ignored.")
            return self._selection
        if new_selection == self._selection:
            return self._selection

        self._undo.append(self._selection)
        if len(self._undo) > self.history_limit:
            del self._undo[0]
        self._redo.clear()
        self._selection = new_selection
        return self._selection

    def _require_ready(self) -> None:
        if self._state is not SessionState.READY:
            raise SessionStateError(
                f"Operation requires a ready session; session is {self._state.value}."
            )


def _sorted_ids(ids: FrozenSet[NodeId]) -> List[NodeId]:
    """Deterministic order for mixed int/str id sets."""
    return sorted(ids, key=lambda i: (isinstance(i, str), i))
