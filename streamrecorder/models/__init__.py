"""Data models for stream variants, access tokens, and recorder settings."""

from .settings_models import RecorderSettings
from .stream_models import PlaybackAccessToken, Variant

__all__ = ["PlaybackAccessToken", "RecorderSettings", "Variant"]
