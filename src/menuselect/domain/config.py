from __future__ import annotations

"""
Configuration Domain Management.

Persists application settings as JSON in the user data directory and
layers environment overrides on top. Unreadable or foreign files never
abort startup: defaults are returned and the problem is logged.
"""

import json
import logging
import os
from typing import Any, Dict, Mapping, Optional

from menuselect.infra.fs import get_user_data_dir, write_json_atomic
from menuselect.infra.network.common import DEFAULT_API_URL, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE_NAME = "config.json"
CURRENT_CONFIG_VERSION = "1.0.0"

ORPHAN_POLICIES = ("drop", "promote")

ENV_API_URL = "MENUSELECT_API_URL"
ENV_TOKEN = "MENUSELECT_TOKEN"


def get_config_path() -> str:
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Remote API
        "api_base_url": DEFAULT_API_URL,
        "access_token": "",
        "request_timeout": DEFAULT_TIMEOUT,

        # Tree building
        "orphan_policy": "drop",

        # Diagnostics
        "log_level": "INFO",
        "log_file": "",

        # Session memory
        "last_scope": "",
    }

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load settings from disk merged over the defaults.

    Args:
        path: Config file location. Defaults to the user data directory.

    Returns:
        Dict[str, Any]: Merged configuration (unvalidated).
    """
    config = get_default_config()
    path = path or get_config_path()

    if not os.path.exists(path):
        logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config '{path}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    settings = data.get("settings", {})
    if isinstance(settings, dict):
        config.update({k: v for k, v in settings.items() if k in config})
    return config


def save_config(config: Mapping[str, Any], path: Optional[str] = None) -> None:
    """
    Persist settings to disk. The access token is never written.

    Args:
        config: Configuration to store.
        path: Destination. Defaults to the user data directory.
    """
    path = path or get_config_path()
    settings = {k: v for k, v in config.items() if k in get_default_config()}
    settings["access_token"] = ""

    try:
        write_json_atomic(path, {"version": CURRENT_CONFIG_VERSION, "settings": settings})
        logger.debug(f"Configuration saved to {path}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")


def apply_env_overrides(
        config: Mapping[str, Any],
        environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Overlay MENUSELECT_API_URL / MENUSELECT_TOKEN on a configuration."""
    env = os.environ if environ is None else environ
    out = dict(config)
    if env.get(ENV_API_URL):
        out["api_base_url"] = env[ENV_API_URL]
    if env.get(ENV_TOKEN):
        out["access_token"] = env[ENV_TOKEN]
    return out
