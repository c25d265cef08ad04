"""Shared HTTP helpers for the Twitch APIs and HLS CDN resources."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
import requests

from ..errors import FetchTimeoutError, HttpStatusError, NetworkError

USER_AGENT = "streamrecorder/0.5"

DEFAULT_HEADERS: Dict[str, str] = {
    "user-agent": USER_AGENT,
    "accept": "*/*",
}


class HttpClient:
    """Handles API requests (blocking) and CDN fetches (asyncio) with shared headers."""

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout
        self._api_session = requests.Session()
        self._api_session.headers.update(DEFAULT_HEADERS)

        self._cdn_async_session: Optional[aiohttp.ClientSession] = None
        self._cdn_async_lock: Optional[asyncio.Lock] = None
        self._cdn_loop: Optional[asyncio.AbstractEventLoop] = None

    def request_api(self, url: str, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Any:
        """POST JSON to an API endpoint and return the decoded JSON body."""

        try:
            response = self._api_session.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.Timeout as exc:
            logging.error("HTTP POST to %s timed out: %s", url, exc)
            raise FetchTimeoutError(f"POST {url} timed out", stage="variant resolution") from exc
        except requests.RequestException as exc:
            logging.error("HTTP POST to %s failed: %s", url, exc)
            raise NetworkError(f"POST {url} failed: {exc}", stage="variant resolution") from exc

        if not response.ok:
            logging.error("API request to %s failed with status %s", url, response.status_code)
            raise HttpStatusError(response.status_code, url, stage="variant resolution")
        return response.json()

    def get_text(self, url: str) -> str:
        """Blocking GET for small text resources such as a master playlist."""

        try:
            response = self._api_session.get(url, timeout=self.timeout)
        except requests.Timeout as exc:
            logging.error("GET %s timed out: %s", url, exc)
            raise FetchTimeoutError(f"GET {url} timed out", stage="variant resolution") from exc
        except requests.RequestException as exc:
            logging.error("GET %s failed: %s", url, exc)
            raise NetworkError(f"GET {url} failed: {exc}", stage="variant resolution") from exc

        if not response.ok:
            logging.error("GET %s failed with status %s", url, response.status_code)
            raise HttpStatusError(response.status_code, url, stage="variant resolution")
        return response.text

    async def fetch_text(self, url: str, timeout: Optional[float] = None, stage: str = "playlist fetch") -> str:
        """Fetch a CDN resource as text (e.g., a media playlist)."""

        body = await self._fetch(url, timeout, stage)
        return body.decode("utf-8", errors="replace")

    async def fetch_bytes(self, url: str, timeout: Optional[float] = None, stage: str = "segment fetch") -> bytes:
        """Fetch a CDN resource fully into memory (e.g., a TS segment)."""

        return await self._fetch(url, timeout, stage)

    async def _fetch(self, url: str, timeout: Optional[float], stage: str) -> bytes:
        session = await self._get_cdn_async_session()
        client_timeout = aiohttp.ClientTimeout(total=timeout or None)
        try:
            async with session.get(url, timeout=client_timeout) as resp:
                if resp.status >= 400:
                    logging.error("%s: %s returned HTTP %s", stage, url, resp.status)
                    raise HttpStatusError(resp.status, url, stage=stage)
                return await resp.read()
        except asyncio.TimeoutError as exc:
            logging.error("%s: %s timed out after %ss", stage, url, timeout)
            raise FetchTimeoutError(f"{url} timed out after {timeout}s", stage=stage) from exc
        except aiohttp.ClientError as exc:
            logging.error("%s: %s failed: %s", stage, url, exc)
            raise NetworkError(f"{url} failed: {exc}", stage=stage) from exc

    async def _get_cdn_async_session(self) -> aiohttp.ClientSession:
        current_loop = asyncio.get_running_loop()
        if self._cdn_async_session:
            if (
                self._cdn_async_session.closed
                or not self._cdn_loop
                or self._cdn_loop.is_closed()
                or self._cdn_loop is not current_loop
            ):
                await self._shutdown_cdn_session()

        if self._cdn_async_lock is None:
            self._cdn_async_lock = asyncio.Lock()

        async with self._cdn_async_lock:
            if self._cdn_async_session and not self._cdn_async_session.closed:
                return self._cdn_async_session
            self._cdn_async_session = aiohttp.ClientSession(headers=DEFAULT_HEADERS.copy())
            self._cdn_loop = current_loop
        return self._cdn_async_session

    async def _shutdown_cdn_session(self) -> None:
        if self._cdn_async_session and not self._cdn_async_session.closed:
            try:
                await self._cdn_async_session.close()
            except RuntimeError as exc:
                logging.debug("Closing stale CDN session failed: %s", exc)
        self._cdn_async_session = None
        self._cdn_async_lock = None
        self._cdn_loop = None

    async def aclose(self) -> None:
        await self._shutdown_cdn_session()

    def close(self) -> None:
        self._api_session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
