from __future__ import annotations

"""
Unit tests for the main entry point and its global supervisor.
"""

import sys
from unittest.mock import patch

import pytest

from menuselect import main as entrypoint


@pytest.fixture(autouse=True)
def restore_excepthook(monkeypatch):
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)


def test_main_delegates_to_cli() -> None:
    with patch("menuselect.interface.cli.app.main", return_value=0) as cli_main:
        assert entrypoint.main(["--dump-config"]) == 0
    cli_main.assert_called_once_with(["--dump-config"])
    assert sys.excepthook is entrypoint.global_exception_handler


def test_unexpected_crash_is_reported(capsys) -> None:
    with patch("menuselect.interface.cli.app.main", side_effect=RuntimeError("kaboom")):
        code = entrypoint.main(["--role", "1"])

    err = capsys.readouterr().err
    assert code == 1
    assert "CRITICAL ERROR (MENUSELECT CLI)" in err
    assert "kaboom" in err
