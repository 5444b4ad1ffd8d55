from __future__ import annotations

"""
Domain Error Taxonomy.

Every failure raised by the package derives from MenuSelectError so that
interface layers can trap them with a single clause. Remote failures keep
the originating exception as __cause__.
"""

from typing import Any, Optional


class MenuSelectError(Exception):
    """Base class for all package errors."""


class RecordFormatError(MenuSelectError, ValueError):
    """A menu record received from a source is malformed."""


class UnknownNodeError(MenuSelectError, LookupError):
    """An operation referenced an id that is not part of the node universe."""

    def __init__(self, node_id: Any):
        super().__init__(f"Unknown menu node: {node_id!r}")
        self.node_id = node_id


class SessionStateError(MenuSelectError):
    """An assignment session operation was invoked in the wrong state."""


class EmptySelectionError(MenuSelectError):
    """Save blocked locally: at least one menu must remain assigned."""

    def __init__(self, message: str = "Please select at least one menu."):
        super().__init__(message)


class RemoteError(MenuSelectError):
    """
    Failure reported at the I/O boundary.

    Attributes:
        status_code: HTTP status when the server answered, else None.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FetchFailure(RemoteError):
    """The node universe or the baseline selection could not be loaded."""


class PersistFailure(RemoteError):
    """The replace-all assignment call failed; nothing was applied."""


class OrphanRecordWarning(UserWarning):
    """A record is unreachable from any root and was left out of the forest."""
