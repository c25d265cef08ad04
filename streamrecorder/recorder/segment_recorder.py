"""Live HLS poll loop that appends newly listed segments to one output file."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, List, Optional
from urllib.parse import urljoin

from ..models import RecorderSettings
from ..utils.http_client import HttpClient
from .append_sink import AppendSink
from .playlist_parser import iter_segment_locators
from .progress import ProgressReporter
from .seen_set import SeenSet

Sleeper = Callable[[float], Awaitable[None]]


class RecorderState(enum.Enum):
    POLLING = "polling"
    DRAINING = "draining"
    SLEEPING = "sleeping"


class SegmentRecorder:
    """Polls a media playlist and appends each new segment exactly once, in order."""

    def __init__(
        self,
        http_client: HttpClient,
        sink: AppendSink,
        playlist_url: str,
        settings: Optional[RecorderSettings] = None,
        progress: Optional[ProgressReporter] = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._http_client = http_client
        self._sink = sink
        self._sleep = sleep
        self.playlist_url = playlist_url
        self.settings = settings or RecorderSettings()
        self.progress = progress
        self.seen = SeenSet()
        self.state = RecorderState.POLLING
        self.cycles_completed = 0
        self.segments_recorded = 0

    async def run(self) -> None:
        """Polls forever; any fetch or write error propagates to the caller."""

        while True:
            appended = await self.poll_once()
            if appended:
                logging.debug("Cycle %s appended %s segment(s)", self.cycles_completed, appended)
            self.state = RecorderState.SLEEPING
            await self._sleep(self.settings.poll_interval)

    async def poll_once(self) -> int:
        self.state = RecorderState.POLLING
        text = await self._http_client.fetch_text(
            self.playlist_url,
            timeout=self.settings.playlist_timeout,
            stage="playlist fetch",
        )

        self.state = RecorderState.DRAINING
        if self.settings.workers > 1:
            # Every new locator in the snapshot is admitted before any download starts.
            fresh = [locator for locator in iter_segment_locators(text) if self.seen.admit(locator)]
            await self._drain_concurrently(fresh)
            appended = len(fresh)
        else:
            appended = 0
            for locator in iter_segment_locators(text):
                if not self.seen.admit(locator):
                    continue
                self._append(locator, await self._fetch_segment(locator))
                appended += 1

        self.cycles_completed += 1
        return appended

    async def _fetch_segment(self, locator: str) -> bytes:
        return await self._http_client.fetch_bytes(
            urljoin(self.playlist_url, locator),
            timeout=self.settings.segment_timeout,
            stage="segment fetch",
        )

    async def _drain_concurrently(self, locators: List[str]) -> None:
        if not locators:
            return
        sem = asyncio.Semaphore(self.settings.workers)

        async def download(locator: str) -> bytes:
            async with sem:
                return await self._fetch_segment(locator)

        tasks = [asyncio.ensure_future(download(locator)) for locator in locators]
        try:
            for locator, task in zip(locators, tasks):
                self._append(locator, await task)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    def _append(self, locator: str, data: bytes) -> None:
        self._sink.write(data)
        self.segments_recorded += 1
        logging.debug("Appended %s (%s bytes)", locator, len(data))
        if self.progress:
            self.progress.record(len(data))
