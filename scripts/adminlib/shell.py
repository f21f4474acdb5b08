from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from .logging_utils import get_logger


@dataclass
class CommandResult:
    command: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _format_command(command: str | Sequence[str]) -> str:
    if isinstance(command, str):
        return command
    return " ".join(shlex.quote(str(part)) for part in command)


def run(
    command: str | Sequence[str],
    *,
    check: bool = False,
    capture_output: bool = True,
    text: bool = True,
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[str] = None,
) -> CommandResult:
    """Run a command and return a normalized `CommandResult`.

    Strings go through the shell; sequences are executed directly so paths
    with spaces (common under ``C:\\Program Files``) need no quoting.
    """
    formatted = _format_command(command)
    args = command if isinstance(command, str) else [str(part) for part in command]
    completed = subprocess.run(
        args,
        shell=isinstance(command, str),
        capture_output=capture_output,
        text=text,
        env=env,
        cwd=cwd,
    )
    result = CommandResult(formatted, completed.returncode, completed.stdout or "", completed.stderr or "")
    if check and not result.ok:
        raise subprocess.CalledProcessError(result.returncode, formatted, output=result.stdout, stderr=result.stderr)
    return result


def run_logged(
    command: str | Sequence[str],
    *,
    logger_name: str = "adminkit.shell",
    check: bool = False,
    capture_output: bool = True,
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[str] = None,
) -> CommandResult:
    """Run a command and log stdout/stderr if it fails or when verbose."""
    logger = get_logger(logger_name)
    try:
        result = run(command, check=False, capture_output=capture_output, env=env, cwd=cwd)
    except OSError as exc:
        formatted = _format_command(command)
        logger.error("CMD FAIL (%s): %s", formatted, exc)
        if check:
            raise
        return CommandResult(formatted, 127, "", str(exc))
    if result.ok:
        logger.info("CMD OK: %s", result.command)
        if capture_output and result.stdout.strip():
            logger.debug(result.stdout.strip())
    else:
        logger.error("CMD FAIL (%s): rc=%s", result.command, result.returncode)
        if result.stdout.strip():
            logger.error("STDOUT: %s", result.stdout.strip())
        if result.stderr.strip():
            logger.error("STDERR: %s", result.stderr.strip())
        if check:
            raise subprocess.CalledProcessError(result.returncode, result.command, output=result.stdout, stderr=result.stderr)
    return result
