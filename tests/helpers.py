"""Fakes shared by the recorder tests."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Sequence, Union

PLAYLIST_URL = "https://cdn.example.com/live/chunked/index.m3u8"
SEGMENT_BASE = "https://cdn.example.com/live/chunked/"


class StopPolling(Exception):
    """Raised by the fake client once its scripted playlists run out."""


def media_playlist(*locators: str, sequence: int = 0) -> str:
    lines = ["#EXTM3U", "#EXT-X-VERSION:3", "#EXT-X-TARGETDURATION:2", f"#EXT-X-MEDIA-SEQUENCE:{sequence}"]
    for locator in locators:
        lines.append("#EXTINF:2.000,live")
        lines.append(locator)
    return "\n".join(lines) + "\n"


class FakeHttpClient:
    """Scripted stand-in for HttpClient's async fetch methods."""

    def __init__(
        self,
        playlists: Sequence[Union[str, BaseException]],
        segments: Dict[str, Union[bytes, BaseException]],
        delays: Optional[Dict[str, float]] = None,
    ) -> None:
        self.playlists = list(playlists)
        self.segments = segments
        self.delays = delays or {}
        self.playlist_requests: List[tuple] = []
        self.segment_requests: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_text(self, url: str, timeout=None, stage: str = "playlist fetch") -> str:
        self.playlist_requests.append((url, timeout))
        if not self.playlists:
            raise StopPolling()
        item = self.playlists.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def fetch_bytes(self, url: str, timeout=None, stage: str = "segment fetch") -> bytes:
        self.segment_requests.append((url, timeout))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(url)
            if delay:
                await asyncio.sleep(delay)
            item = self.segments[url]
            if isinstance(item, BaseException):
                raise item
            return item
        finally:
            self.in_flight -= 1

    @property
    def fetched_urls(self) -> List[str]:
        return [url for url, _ in self.segment_requests]


class RecordingSleep:
    """Async sleep replacement that only records requested durations."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def segment_bytes(name: str) -> bytes:
    return f"<{name}>".encode() * 4


def segment_map(*names: str) -> Dict[str, bytes]:
    return {SEGMENT_BASE + name: segment_bytes(name) for name in names}

