"""Periodic throughput reporting for long recordings."""

from __future__ import annotations

import logging
import time
from typing import Callable

from ..models.settings_models import DEFAULT_PROGRESS_THRESHOLD


class ProgressReporter:
    """Logs cumulative size, rate and elapsed time each time ``threshold`` bytes pass."""

    def __init__(
        self,
        threshold: int = DEFAULT_PROGRESS_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.threshold = threshold
        self.total_bytes = 0
        self._clock = clock
        self._started = clock()

    def record(self, nbytes: int) -> bool:
        """Adds ``nbytes``; returns True when a progress line was emitted."""

        before = self.total_bytes // self.threshold
        self.total_bytes += nbytes
        if self.total_bytes // self.threshold == before:
            return False

        megabytes = self.total_bytes / 1_000_000
        elapsed = max(int(self._clock() - self._started), 1)
        logging.info(
            "%.1f MB downloaded | %.1f MB/s | %d s elapsed",
            megabytes,
            megabytes / elapsed,
            elapsed,
        )
        return True
