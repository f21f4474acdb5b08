from __future__ import annotations

from pathlib import Path

# Base paths
REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ASSETS_DIR = REPO_ROOT / "assets"

# Reference CSV every script expects inside the assets folder
DEFAULT_ASSET_FILE = "Building-Department-Codes.csv"

PYPI_JSON_URL = "https://pypi.org/pypi/{package}/json"
