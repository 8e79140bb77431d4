"""Round-trip timing."""

from __future__ import annotations

import time
from typing import Optional


class Stopwatch:
    """Measure wall-clock time around a block.

        with Stopwatch() as sw:
            do_request()
        sw.elapsed  # seconds, float
    """

    def __init__(self) -> None:
        self._start: Optional[float] = None
        self._stop: Optional[float] = None

    def __enter__(self) -> "Stopwatch":
        self._start = time.perf_counter()
        self._stop = None
        return self

    def __exit__(self, *exc_info) -> None:
        self._stop = time.perf_counter()

    @property
    def elapsed(self) -> float:
        """Seconds between enter and exit (or now, while still running)."""
        if self._start is None:
            return 0.0
        end = self._stop if self._stop is not None else time.perf_counter()
        return end - self._start
