from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

# Whether we've already configured the root logger
_configured = False

# Tagged errors recorded during this process, oldest first
_error_records: list["ErrorRecord"] = []


@dataclass
class ErrorRecord:
    tag: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    exception: Optional[BaseException] = None


def _supports_color() -> bool:
    """Detect if stdout likely supports ANSI colors."""
    if os.getenv("NO_COLOR"):
        return False
    force_color = os.getenv("FORCE_COLOR")
    if force_color and force_color not in ("0", "false", "False"):
        return True
    if os.getenv("TERM") in (None, "dumb"):
        return False
    return sys.stdout.isatty()


def _colorize(message: str, color: str) -> str:
    if not _supports_color():
        return message
    return f"{color}{message}\033[0m"


class _ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level = record.levelname
        msg = record.getMessage()
        if record.levelno >= logging.ERROR:
            level = _colorize(level, "\033[31m")  # red
            msg = _colorize(msg, "\033[31m")
        elif record.levelno >= logging.WARNING:
            level = _colorize(level, "\033[33m")  # yellow
        elif record.levelno == logging.INFO:
            level = _colorize(level, "\033[36m")  # cyan
        if record.exc_info and record.levelno >= logging.ERROR:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        return f"[{timestamp}] [{level}] {msg}"


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[Path | str] = None,
    *,
    force: bool = False,
) -> None:
    """Configure the root logger once (or again with ``force``)."""
    global _configured
    if _configured and not force:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(_ConsoleFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.addHandler(handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        # Plain text in the file, no ANSI codes
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        root.addHandler(file_handler)

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger, ensuring global configuration exists."""
    configure_logging()
    return logging.getLogger(name)


def log_section(title: str, char: str = "#", width: int = 60) -> None:
    """Print a standardized log banner for phase start/end."""
    logger = get_logger("adminkit.section")
    border = char * width
    logger.info("\n%s\n[%s]\n%s\n", border, title, border)


def log_success(message: str) -> None:
    logger = get_logger("adminkit.success")
    logger.info(_colorize(message, "\033[32m"))


def record_error(tag: str, message: str, exc: Optional[BaseException] = None) -> ErrorRecord:
    """Log ``[tag] message`` and keep it in the process-wide error list."""
    record = ErrorRecord(tag=tag, message=message, exception=exc)
    _error_records.append(record)
    get_logger("adminkit.errors").error("[%s] %s", tag, message)
    return record


def error_records() -> list[ErrorRecord]:
    return list(_error_records)


def clear_error_records() -> None:
    _error_records.clear()
