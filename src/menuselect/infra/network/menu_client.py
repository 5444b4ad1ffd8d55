from __future__ import annotations

"""
Menu API Client.

HTTP implementation of the three collaborator operations used by an
assignment session: fetch the flat menu list, fetch the menus assigned to
a role, and replace a role's assignment in one call. Failures are logged
and re-raised as FetchFailure / PersistFailure.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Type

import requests

from menuselect.domain.errors import FetchFailure, PersistFailure, RecordFormatError, RemoteError
from menuselect.domain.node_models import NodeId, NodeRecord, records_from_payload
from menuselect.infra.network.common import (
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT,
    USER_AGENT,
    extract_error_message,
)

logger = logging.getLogger(__name__)


class MenuApiClient:
    """
    Thin wrapper over a requests.Session bound to the admin API base URL.

    Usable as a context manager; the underlying session is closed on exit.
    """

    def __init__(
            self,
            base_url: str = DEFAULT_API_URL,
            token: Optional[str] = None,
            timeout: float = DEFAULT_TIMEOUT,
            session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        })
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def __enter__(self) -> MenuApiClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    # -------------------------------------------------------------------------
    # COLLABORATOR OPERATIONS
    # -------------------------------------------------------------------------

    def fetch_node_universe(self) -> List[NodeRecord]:
        """GET /menu/flat: the complete, flat, parent-referencing menu list."""
        payload = self._request_json("GET", "/menu/flat", FetchFailure)
        try:
            records = records_from_payload(payload)
        except RecordFormatError as e:
            logger.error(f"Network: Malformed menu list: {e}")
            raise FetchFailure(f"Malformed menu list: {e}") from e

        logger.info(f"Network: Loaded {len(records)} menu records.")
        return records

    def fetch_baseline_selection(self, scope_key: NodeId) -> List[NodeId]:
        """GET /menu/role/{scope}: ids of the menus currently assigned."""
        payload = self._request_json("GET", f"/menu/role/{scope_key}", FetchFailure)
        if not isinstance(payload, list):
            raise FetchFailure(
                f"Malformed assignment list for role {scope_key!r}: "
                f"expected array, received {type(payload).__name__}."
            )

        ids: List[NodeId] = []
        for item in payload:
            if isinstance(item, dict) and item.get("id") is not None:
                ids.append(item["id"])
            elif isinstance(item, (int, str)):
                ids.append(item)
            else:
                raise FetchFailure(f"Malformed assignment entry for role {scope_key!r}: {item!r}")

        logger.info(f"Network: Role {scope_key!r} has {len(ids)} menu(s) assigned.")
        return ids

    def persist_selection(self, scope_key: NodeId, ids: Sequence[NodeId]) -> None:
        """POST /menu/role/{scope}/assign: overwrite the whole assignment."""
        body: Dict[str, Any] = {"menuIds": list(ids)}
        self._request("POST", f"/menu/role/{scope_key}/assign", PersistFailure, json=body)
        logger.info(f"Network: Role {scope_key!r} assignment replaced ({len(body['menuIds'])} menus).")

    # -------------------------------------------------------------------------
    # TRANSPORT HELPERS
    # -------------------------------------------------------------------------

    def _request(
            self,
            method: str,
            path: str,
            failure: Type[RemoteError],
            **kwargs: Any,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug(f"Network: {method} {url}")

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response

        except requests.exceptions.Timeout as e:
            logger.warning(f"Network: {method} {path} timed out after {self.timeout}s.")
            raise failure(f"Request timed out after {self.timeout}s: {method} {path}") from e

        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            detail = extract_error_message(e.response) or str(e)
            if status == 401:
                logger.error("Network: Access token missing or expired (401).")
            else:
                logger.error(f"Network: {method} {path} failed with HTTP {status}: {detail}")
            raise failure(detail, status_code=status) from e

        except requests.exceptions.RequestException as e:
            logger.error(f"Network: Communication error during {method} {path}: {e}")
            raise failure(f"Communication error: {e}") from e

    def _request_json(self, method: str, path: str, failure: Type[RemoteError]) -> Any:
        response = self._request(method, path, failure)
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Network: {method} {path} returned invalid JSON.")
            raise failure(f"Invalid JSON in response to {method} {path}") from e
