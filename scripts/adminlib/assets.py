from __future__ import annotations

from pathlib import Path
from typing import Optional

from . import dialogs
from .errors import AssetsMissingError, DialogError, report_failure
from .file_ops import read_csv_rows
from .logging_utils import get_logger

logger = get_logger("adminkit.assets")


def asset_path(folder: Path | str, file_name: str) -> Path:
    return Path(folder) / file_name


def has_asset_file(folder: Path | str, file_name: str) -> bool:
    folder = Path(folder)
    return folder.is_dir() and asset_path(folder, file_name).is_file()


def verify_assets_folder(
    folder: Path | str,
    file_name: str,
    *,
    interactive: Optional[bool] = None,
) -> Optional[Path]:
    """Return the assets folder holding ``file_name``, or None.

    When the configured folder is unusable the user is asked to locate it; a
    picked folder without the file leads back to the prompt. Cancelling is a
    terminal failure for the calling script.
    """
    folder = Path(folder)
    if has_asset_file(folder, file_name):
        logger.info("Assets folder OK: %s", folder)
        return folder

    if interactive is None:
        interactive = dialogs.is_interactive()

    missing = asset_path(folder, file_name)
    logger.warning("Asset file not found at %s", missing)
    if not interactive:
        return _fail(f"Asset file not found: {missing}", interactive=False)

    message = (
        f"The assets folder is missing or does not contain {file_name}.\n\n"
        f"Expected: {missing}\n\n"
        "Press OK to locate the assets folder, or Cancel to stop."
    )
    initial_dir = folder if folder.is_dir() else folder.parent
    try:
        return _locate_folder(missing, file_name, message, initial_dir)
    except DialogError as exc:
        return _fail(f"Asset file not found: {missing} ({exc})", interactive=False)


def _locate_folder(missing: Path, file_name: str, message: str, initial_dir: Path) -> Optional[Path]:
    while True:
        choice = dialogs.show_message(
            message, "Assets Folder Missing", dialogs.OK_CANCEL, dialogs.ICON_WARNING, interactive=True
        )
        if choice != "OK":
            return _fail(f"Asset file not found: {missing}", interactive=False)

        picked = dialogs.pick_folder_dialog("Locate Assets Folder", initial_dir, interactive=True)
        if picked is None:
            return _fail(f"Asset file not found: {missing}", interactive=False)
        if has_asset_file(picked, file_name):
            logger.info("Using assets folder selected by user: %s", picked)
            return picked

        logger.warning("Selected folder %s does not contain %s", picked, file_name)
        initial_dir = picked
        message = (
            f"{picked} does not contain {file_name}.\n\n"
            "Press OK to pick another folder, or Cancel to stop."
        )


def _fail(message: str, *, interactive: bool) -> None:
    report_failure(AssetsMissingError(message), "Assets Folder Missing", interactive=interactive)
    return None


def load_asset_rows(folder: Path | str, file_name: str) -> list[dict[str, str]]:
    """Read the reference CSV from the assets folder."""
    path = asset_path(folder, file_name)
    try:
        rows = read_csv_rows(path)
    except FileNotFoundError as exc:
        raise AssetsMissingError(f"Asset file not found: {path}") from exc
    logger.info("Loaded %d row(s) from %s", len(rows), path)
    return rows
