"""Restart policy for the poll loop when upstream hiccups are transient."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from ..errors import FetchTimeoutError, HttpStatusError, NetworkError
from .segment_recorder import SegmentRecorder

Sleeper = Callable[[float], Awaitable[None]]


class RetryPolicy:
    """Bounded restarts with exponential backoff for transient failures."""

    def __init__(self, max_retries: int = 0, base_delay: float = 1.0, max_delay: float = 30.0) -> None:
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay

    @staticmethod
    def is_transient(exc: BaseException) -> bool:
        if isinstance(exc, HttpStatusError):
            return exc.is_transient
        return isinstance(exc, (NetworkError, FetchTimeoutError))

    def should_retry(self, exc: BaseException, failures: int) -> bool:
        return failures < self.max_retries and self.is_transient(exc)

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * 2 ** (attempt - 1), self.max_delay)


async def run_supervised(
    recorder: SegmentRecorder,
    policy: RetryPolicy,
    sleep: Sleeper = asyncio.sleep,
) -> None:
    """Runs ``recorder`` until a terminal error, restarting after transient ones."""

    failures = 0
    while True:
        completed_before = recorder.cycles_completed
        try:
            await recorder.run()
        except (NetworkError, FetchTimeoutError, HttpStatusError) as exc:
            if recorder.cycles_completed > completed_before:
                failures = 0
            if not policy.should_retry(exc, failures):
                raise
            failures += 1
            delay = policy.delay_for(failures)
            logging.warning(
                "%s failed (attempt %s/%s): %s; restarting in %.1fs",
                exc.stage or "recording",
                failures,
                policy.max_retries,
                exc,
                delay,
            )
            await sleep(delay)
