"""Runtime settings for a recording session."""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_PLAYLIST_TIMEOUT = 10.0
DEFAULT_SEGMENT_TIMEOUT = 10.0
DEFAULT_PROGRESS_THRESHOLD = 10_000_000


class RecorderSettings(BaseModel):
    """Knobs for the poll loop, validated from CLI arguments or the environment.

    A ``segment_timeout`` of ``0`` disables the bound on segment downloads.
    """

    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    playlist_timeout: float = Field(default=DEFAULT_PLAYLIST_TIMEOUT, gt=0)
    segment_timeout: float = Field(default=DEFAULT_SEGMENT_TIMEOUT, ge=0)
    workers: int = Field(default=1, ge=1)
    retries: int = Field(default=0, ge=0)
    retry_base_delay: float = Field(default=1.0, gt=0)
    retry_max_delay: float = Field(default=30.0, gt=0)
    fsync: bool = True
    progress_threshold: int = Field(default=DEFAULT_PROGRESS_THRESHOLD, gt=0)
