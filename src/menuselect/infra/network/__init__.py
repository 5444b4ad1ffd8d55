from __future__ import annotations

"""
Network Communication Infrastructure.

Facade over the HTTP clients talking to the admin API.
"""

from menuselect.infra.network.common import (
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT,
    USER_AGENT,
    extract_error_message,
)
from menuselect.infra.network.menu_client import MenuApiClient

__all__ = [
    "MenuApiClient",
    "extract_error_message",
    "DEFAULT_API_URL",
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
]
