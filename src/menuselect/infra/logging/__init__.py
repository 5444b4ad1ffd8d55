from __future__ import annotations

from .config import LoggingConfig, parse_level
from .core import (
    CONFIGURED_FLAG_ATTR,
    QUEUE_LISTENER_ATTR,
    configure_logging,
    get_default_log_path,
    get_logger,
    get_recent_logs,
    shutdown_logging,
)
from .handlers import HANDLER_TAG_ATTR

__all__ = [
    "LoggingConfig",
    "parse_level",
    "configure_logging",
    "shutdown_logging",
    "get_logger",
    "get_recent_logs",
    "get_default_log_path",
    "CONFIGURED_FLAG_ATTR",
    "QUEUE_LISTENER_ATTR",
    "HANDLER_TAG_ATTR",
]
