from __future__ import annotations

import ctypes
import os
import subprocess
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import dialogs
from .errors import ElevationError, report_failure
from .logging_utils import get_logger

logger = get_logger("adminkit.elevation")

# ShellExecuteW returns a value greater than 32 on success
_SHELL_EXECUTE_OK = 32
SW_SHOWNORMAL = 1


def is_windows() -> bool:
    return sys.platform == "win32"


def is_admin() -> bool:
    """Return True when the current process has administrator rights."""
    try:
        if is_windows():
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        return os.geteuid() == 0
    except (AttributeError, OSError):
        return False


def relaunch_command(
    argv: Optional[Sequence[str]] = None, extra_args: Sequence[str] = ()
) -> tuple[str, str]:
    """Return the executable and parameter string that rerun this script.

    ``extra_args`` are appended after the script's own arguments.
    """
    args = list(sys.argv if argv is None else argv)
    rest = [*args[1:], *extra_args]
    if getattr(sys, "frozen", False):
        return sys.executable, subprocess.list2cmdline(rest)
    script = str(Path(args[0]).resolve()) if args and args[0] else ""
    params = [script, *rest] if script else rest
    return sys.executable, subprocess.list2cmdline(params)


def _shell_execute(executable: str, params: str, cwd: Optional[str]) -> int:
    return int(
        ctypes.windll.shell32.ShellExecuteW(None, "runas", executable, params, cwd, SW_SHOWNORMAL)
    )


def ensure_admin(
    *,
    argv: Optional[Sequence[str]] = None,
    extra_args: Sequence[str] = (),
    interactive: Optional[bool] = None,
) -> bool:
    """Make sure the script runs elevated.

    Returns True when already elevated. Otherwise an elevated copy is started
    (Windows) and False is returned so the caller can exit; on other platforms
    the user is told to rerun with sudo.
    """
    if is_admin():
        logger.info("Running with administrator privileges")
        return True

    if interactive is None:
        interactive = dialogs.is_interactive()

    if not is_windows():
        return report_failure(
            ElevationError("This script must be run as root (use sudo)"),
            "Administrator Required",
            interactive=interactive,
        )

    executable, params = relaunch_command(argv, extra_args)
    logger.info("Restarting with administrator privileges: %s %s", executable, params)
    try:
        code = _shell_execute(executable, params, os.getcwd())
    except (AttributeError, OSError) as exc:
        return report_failure(
            ElevationError(f"Could not request elevation: {exc}"),
            "Administrator Required",
            interactive=interactive,
        )

    if code > _SHELL_EXECUTE_OK:
        logger.info("Elevated instance started; this instance will exit")
        return False

    # 5 (access denied) is what ShellExecuteW returns when UAC is declined
    reason = "elevation was declined" if code == 5 else f"ShellExecuteW returned {code}"
    return report_failure(
        ElevationError(f"Could not restart with administrator privileges: {reason}"),
        "Administrator Required",
        interactive=interactive,
    )
