from __future__ import annotations

from typing import Optional

from .logging_utils import record_error


class AdminKitError(Exception):
    """Base error that should stop the calling script."""

    tag = "AdminKitError"


class ConfigError(AdminKitError):
    """Raised when configuration values cannot be parsed."""

    tag = "ConfigInvalid"


class AssetsMissingError(AdminKitError):
    """Raised when the assets folder or its reference CSV is missing."""

    tag = "AssetsFolderMissing"


class ElevationError(AdminKitError):
    """Raised when the process cannot obtain administrator rights."""

    tag = "ElevationFailed"


class ModuleLoadError(AdminKitError):
    """Raised when a required module cannot be installed or imported."""

    tag = "ModuleLoadFailed"


class DialogError(AdminKitError):
    """Raised when a dialog window cannot be shown."""

    tag = "DialogFailed"


class ExportError(AdminKitError):
    """Raised when rows cannot be written to CSV."""

    tag = "ExportFailed"


def report_failure(exc: AdminKitError, title: str = "Error", *, interactive: Optional[bool] = None) -> bool:
    """Show the error to the user, record its tag and return ``False``.

    This is the single exit path for failures at the public boundary: callers
    return its result so scripts can abort with ``if not ...: sys.exit(1)``.
    """
    from . import dialogs

    record_error(exc.tag, str(exc), exc)
    if interactive is None:
        interactive = dialogs.is_interactive()
    if interactive:
        try:
            dialogs.show_message(str(exc), title, icon=dialogs.ICON_ERROR, interactive=True)
        except DialogError as dialog_exc:
            record_error(dialog_exc.tag, str(dialog_exc), dialog_exc)
    return False
