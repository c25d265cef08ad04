"""API layer for resolving a channel to its stream variants."""

from .twitch_api import TwitchAPI, extract_channel

__all__ = ["TwitchAPI", "extract_channel"]
