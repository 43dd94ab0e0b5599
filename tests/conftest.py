"""Pytest configuration.

The application modules live at the repository root, so the root is put on
``sys.path`` for test runs that don't install the project first. Each test
also gets its own data file and a clean ``SMARTSPEND_*`` environment.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SMARTSPEND_DATA_PATH", os.fspath(tmp_path / "transactions.json"))
    monkeypatch.delenv("SMARTSPEND_MODEL", raising=False)
    monkeypatch.delenv("SMARTSPEND_LOG_LEVEL", raising=False)


@pytest.fixture
def data_path(tmp_path: Path) -> str:
    return os.fspath(tmp_path / "transactions.json")


@pytest.fixture(autouse=True)
def _isolate_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    # entry points configure the process-wide "smartspend" logger; undo that per test
    import logging_setup

    logger = logging.getLogger(logging_setup.ROOT_LOGGER)
    monkeypatch.setattr(logging_setup, "_configured", logging_setup._configured)
    monkeypatch.setattr(logger, "handlers", list(logger.handlers))
    monkeypatch.setattr(logger, "level", logger.level)
    monkeypatch.setattr(logger, "propagate", logger.propagate)
