from __future__ import annotations

"""
Logging Configuration Models.

Immutable settings consumed by the logging bootstrap, plus the mapping
from textual severities to logging constants.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings for the logging subsystem initialization.

    Attributes:
        level: Minimum severity level to capture.
        console: Flag to enable stderr stream output.
        log_file: Optional path for persistent, rotated storage.
        max_bytes: Maximum size per log segment before rotation.
        backup_count: Number of historical log segments to preserve.
        console_fmt: Format for terminal output.
        file_fmt: Format for file entries.
        datefmt: Timestamp format.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 3

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def from_app_config(cls, cfg: Mapping[str, Any], *, debug: bool = False) -> LoggingConfig:
        """Derive logging settings from the validated application config."""
        return cls(
            level="DEBUG" if debug else str(cfg.get("log_level") or "INFO"),
            console=True,
            log_file=cfg.get("log_file") or None,
        )


def parse_level(level: Optional[str]) -> int:
    """Convert a textual level to its numeric constant, defaulting to INFO."""
    if not level:
        return logging.INFO
    return LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)
