"""Pytest configuration to make the helper package importable.

``adminlib`` lives under ``scripts/`` next to the scripts that use it, so the
folder is put on ``sys.path`` the same way the scripts do it themselves.
"""

import os
import sys

import pytest

# Project root = parent directory of this tests/ folder
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SCRIPTS_DIR = os.path.join(PROJECT_ROOT, "scripts")

if SCRIPTS_DIR not in sys.path:
    sys.path.insert(0, SCRIPTS_DIR)

from adminlib import dialogs, modules  # noqa: E402
from adminlib.logging_utils import clear_error_records  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_state(monkeypatch):
    """No real windows, no leftover errors or loaded modules between tests."""
    monkeypatch.delenv("ADMINKIT_NONINTERACTIVE", raising=False)
    dialogs.set_interactive(False)
    clear_error_records()
    modules._loaded.clear()
    yield
    dialogs.set_interactive(None)
    clear_error_records()
    modules._loaded.clear()


@pytest.fixture
def assets_dir(tmp_path):
    folder = tmp_path / "assets"
    folder.mkdir()
    (folder / "codes.csv").write_text(
        "Building,Department,CostCenter\n010,ADM,1100\n020,BIO,2310\n",
        encoding="utf-8",
    )
    return folder
