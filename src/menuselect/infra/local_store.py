from __future__ import annotations

"""
File-Backed Menu Source.

Offline stand-in for the admin API. Reads and writes a single JSON
document:

    {
        "menus": [{"id": 1, "name": "Admin", "parentId": null}, ...],
        "assignments": {"3": [1, 2]}
    }

Assignment keys are stored as strings because JSON object keys are.
"""

import json
import logging
import os
from typing import Any, Dict, List, Sequence

from menuselect.domain.errors import FetchFailure, PersistFailure, RecordFormatError
from menuselect.domain.node_models import NodeId, NodeRecord, records_from_payload
from menuselect.infra.fs import write_json_atomic

logger = logging.getLogger(__name__)


class JsonFileSource:
    """Implements the menu source operations on top of a JSON file."""

    def __init__(self, path: str):
        self.path = path

    def fetch_node_universe(self) -> List[NodeRecord]:
        document = self._read()
        try:
            return records_from_payload(document.get("menus", []))
        except RecordFormatError as e:
            raise FetchFailure(f"Malformed menu list in '{self.path}': {e}") from e

    def fetch_baseline_selection(self, scope_key: NodeId) -> List[NodeId]:
        assignments = self._read().get("assignments", {})
        if not isinstance(assignments, dict):
            raise FetchFailure(f"'assignments' in '{self.path}' must be an object.")
        return list(assignments.get(str(scope_key), []))

    def persist_selection(self, scope_key: NodeId, ids: Sequence[NodeId]) -> None:
        try:
            document = self._read()
        except FetchFailure as e:
            raise PersistFailure(str(e)) from e

        assignments = document.setdefault("assignments", {})
        assignments[str(scope_key)] = list(ids)

        try:
            write_json_atomic(self.path, document)
        except OSError as e:
            logger.error(f"Store: Failed to write '{self.path}': {e}")
            raise PersistFailure(f"Cannot write '{self.path}': {e}") from e
        logger.info(f"Store: Scope {scope_key!r} saved with {len(ids)} menu(s).")

    def _read(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            raise FetchFailure(f"Menu source file not found: {self.path}")
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Store: Cannot read '{self.path}': {e}")
            raise FetchFailure(f"Cannot read '{self.path}': {e}") from e

        if not isinstance(document, dict):
            raise FetchFailure(f"'{self.path}' must contain a JSON object.")
        return document
