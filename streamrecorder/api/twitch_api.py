"""Twitch playback token and variant lookup for a live channel."""

from __future__ import annotations

import logging
import random
from typing import List
from urllib.parse import quote, urlparse

from pydantic import ValidationError

from ..errors import NoVariantsFoundError, ParseError
from ..models import PlaybackAccessToken, Variant
from ..recorder.playlist_parser import parse_variants
from ..utils.http_client import HttpClient

GQL_URL = "https://gql.twitch.tv/gql"
CLIENT_ID = "kimne78kx3ncx6brgo4mv6wki5h1ko"
PLAYBACK_TOKEN_HASH = "0828119ded1c13477966434e15800ff57ddacf13ba1911c129dc2200705b0712"
USHER_URL = "https://usher.ttvnw.net/api/channel/hls/{channel}.m3u8"


def extract_channel(url: str) -> str:
    """Returns the channel login from a channel URL or a bare name."""

    path = urlparse(url).path if "://" in url else url.split("?", 1)[0]
    parts = [part for part in path.strip().split("/") if part]
    if not parts:
        raise ValueError(f"cannot parse channel from URL {url!r}")
    return parts[-1].lower()


class TwitchAPI:
    """Resolves a channel name to the playable quality variants of its live stream."""

    def __init__(self, http_client: HttpClient) -> None:
        self._client = http_client

    def get_access_token(self, channel: str) -> PlaybackAccessToken:
        payload = {
            "operationName": "PlaybackAccessToken",
            "extensions": {"persistedQuery": {"version": 1, "sha256Hash": PLAYBACK_TOKEN_HASH}},
            "variables": {
                "isLive": True,
                "login": channel,
                "isVod": False,
                "vodID": "",
                "playerType": "embed",
            },
        }
        try:
            data = self._client.request_api(GQL_URL, payload, headers={"Client-ID": CLIENT_ID})
        except ValueError as exc:
            raise ParseError(f"token response was not JSON: {exc}", stage="variant resolution") from exc

        if not isinstance(data, dict):
            raise ParseError("token response was not a JSON object", stage="variant resolution")
        body = data.get("data")
        if not isinstance(body, dict):
            raise ParseError("token response has no 'data' object", stage="variant resolution")
        token_data = body.get("streamPlaybackAccessToken")
        if not token_data:
            raise ParseError(f"no playback token for channel {channel!r}", stage="variant resolution")
        try:
            return PlaybackAccessToken.model_validate(token_data)
        except ValidationError as exc:
            logging.error("Unexpected playback token payload: %s", token_data)
            raise ParseError(f"malformed playback token: {exc}", stage="variant resolution") from exc

    def build_master_url(self, channel: str, token: PlaybackAccessToken) -> str:
        query = "sig={sig}&token={token}&allow_source=true&p={rand}".format(
            sig=token.signature,
            token=quote(token.value, safe=""),
            rand=random.randint(0, 2**32 - 1),
        )
        return f"{USHER_URL.format(channel=channel)}?{query}"

    def get_variants(self, channel: str) -> List[Variant]:
        token = self.get_access_token(channel)
        master_url = self.build_master_url(channel, token)
        logging.debug("Fetching master playlist %s", master_url)
        variants = parse_variants(self._client.get_text(master_url))
        if not variants:
            raise NoVariantsFoundError(f"channel {channel!r} exposes no variants", stage="variant resolution")
        return variants
