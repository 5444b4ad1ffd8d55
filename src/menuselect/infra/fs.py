from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Resolves the per-user application data directory and provides an atomic
JSON writer shared by the configuration store and the file-backed menu
source.
"""

import json
import os
import tempfile
from typing import Any

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "MenuSelect"
UNIX_APP_DIR_NAME = ".menuselect"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/MenuSelect
    - Linux/Mac: ~/.menuselect

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def normalize_path(path: str) -> str:
    """Expand '~' and environment variables, then make the path absolute."""
    return os.path.abspath(os.path.expandvars(os.path.expanduser(path.strip())))

# -----------------------------------------------------------------------------
# PERSISTENCE HELPERS
# -----------------------------------------------------------------------------

def write_json_atomic(path: str, data: Any) -> None:
    """
    Write a JSON document through a temporary sibling file and a rename.

    Readers never observe a half-written file.

    Raises:
        OSError: If the directory is not writable.
    """
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=4)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
