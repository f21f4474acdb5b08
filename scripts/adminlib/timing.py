from __future__ import annotations

import contextlib
import logging
import time
from typing import Iterator, Optional

from .logging_utils import get_logger


def format_elapsed(seconds: float) -> str:
    """Render a duration the way the summary lines print it (``4m 7s``)."""
    total = int(max(seconds, 0))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


class Stopwatch:
    def __init__(self) -> None:
        self._started: Optional[float] = None
        self._stopped: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started is not None and self._stopped is None

    def start(self) -> "Stopwatch":
        self._started = time.monotonic()
        self._stopped = None
        return self

    def stop(self) -> float:
        if self._started is None:
            raise RuntimeError("Stopwatch was never started")
        if self._stopped is None:
            self._stopped = time.monotonic()
        return self.elapsed

    @property
    def elapsed(self) -> float:
        if self._started is None:
            return 0.0
        end = self._stopped if self._stopped is not None else time.monotonic()
        return end - self._started


@contextlib.contextmanager
def measure_runtime(label: str, logger: Optional[logging.Logger] = None) -> Iterator[Stopwatch]:
    """Time the enclosed block and log how long it took."""
    logger = logger or get_logger("adminkit.timing")
    watch = Stopwatch().start()
    try:
        yield watch
    except BaseException:
        watch.stop()
        logger.error("%s failed after %s", label, format_elapsed(watch.elapsed))
        raise
    watch.stop()
    logger.info("%s completed in %s", label, format_elapsed(watch.elapsed))
