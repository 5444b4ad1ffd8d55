from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency of
configuration, handler ownership and log file rotation.
"""

import logging
from logging.handlers import QueueHandler
from pathlib import Path

import pytest

from menuselect.infra.logging import (
    CONFIGURED_FLAG_ATTR,
    HANDLER_TAG_ATTR,
    QUEUE_LISTENER_ATTR,
    LoggingConfig,
    configure_logging,
    get_recent_logs,
    parse_level,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach our handlers before and after each test."""
    shutdown_logging()
    yield
    shutdown_logging()


def _our_handlers():
    return [h for h in logging.getLogger().handlers if getattr(h, HANDLER_TAG_ATTR, False)]


def test_logging_idempotency() -> None:
    """Multiple configure calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    count = len(_our_handlers())
    configure_logging(cfg)

    assert count == 1
    assert len(_our_handlers()) == count
    assert isinstance(_our_handlers()[0], QueueHandler)


def test_force_reconfigures_level() -> None:
    configure_logging(LoggingConfig(level="INFO"))
    root = configure_logging(LoggingConfig(level="DEBUG"), force=True)

    assert root.level == logging.DEBUG
    assert len(_our_handlers()) == 1


def test_foreign_handlers_survive_shutdown() -> None:
    root = logging.getLogger()
    foreign = logging.NullHandler()
    root.addHandler(foreign)
    try:
        configure_logging(LoggingConfig())
        shutdown_logging()
        assert foreign in root.handlers
        assert getattr(root, QUEUE_LISTENER_ATTR) is None
        assert not hasattr(root, CONFIGURED_FLAG_ATTR)
    finally:
        root.removeHandler(foreign)


def test_file_sink_receives_records(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "menuselect.log"
    configure_logging(LoggingConfig(level="DEBUG", console=False, log_file=str(log_file)))

    logging.getLogger("menuselect.test").info("Session: Scope 3 ready")
    shutdown_logging()

    content = log_file.read_text(encoding="utf-8")
    assert "Session: Scope 3 ready" in content
    assert "menuselect.test" in content
    assert "Scope 3 ready" in get_recent_logs(5, str(log_file))


def test_log_rotation(tmp_path: Path) -> None:
    """File rotation kicks in once the size limit is exceeded."""
    log_file = tmp_path / "rotate.log"
    configure_logging(LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        max_bytes=200,
        backup_count=1,
    ))

    logger = logging.getLogger("menuselect.rotate")
    for _ in range(20):
        logger.debug("Long enough message to force a rollover of the log file." * 2)
    shutdown_logging()

    assert log_file.exists()
    assert (tmp_path / "rotate.log.1").exists()


def test_recent_logs_without_file(tmp_path: Path) -> None:
    assert get_recent_logs(10, str(tmp_path / "none.log")) == "Log file not found."


@pytest.mark.parametrize("text, expected", [
    ("debug", logging.DEBUG),
    ("WARN", logging.WARNING),
    (None, logging.INFO),
    ("verbose", logging.INFO),
])
def test_parse_level(text, expected) -> None:
    assert parse_level(text) == expected


def test_logging_config_from_app_config() -> None:
    cfg = LoggingConfig.from_app_config({"log_level": "WARNING", "log_file": ""})
    assert cfg.level == "WARNING"
    assert cfg.log_file is None

    debug = LoggingConfig.from_app_config({"log_level": "ERROR"}, debug=True)
    assert debug.level == "DEBUG"
