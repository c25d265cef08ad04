"""Filesystem helpers for preparing output folders and safe filenames."""

from __future__ import annotations

import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

INVALID_FILENAME_CHARS = re.compile(r"[\\/:*?\"<>|]")
OUTPUT_EXTENSION = ".ts"


def sanitize_filename(value: str, default: str = "file") -> str:
    """Removes characters that are invalid on most filesystems."""

    sanitized = INVALID_FILENAME_CHARS.sub("", value or "").strip()
    return sanitized or default


def ensure_directory(path: str) -> str:
    """Creates a directory (and its parents) if needed."""

    Path(path).mkdir(parents=True, exist_ok=True)
    return path


def default_filename(channel: str, now: Optional[datetime] = None) -> str:
    """Returns ``<channel>_<timestamp>.ts`` using local time."""

    moment = now or datetime.now().astimezone()
    stamp = moment.strftime("%Y%m%dT%H%M%S")
    return f"{sanitize_filename(channel, default='stream')}_{stamp}{OUTPUT_EXTENSION}"


def resolve_output_path(
    output: Optional[str],
    channel: str,
    output_dir: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """Picks the recording path from an explicit name or the channel and clock."""

    if output:
        path = output if output.endswith(OUTPUT_EXTENSION) else f"{output}{OUTPUT_EXTENSION}"
    else:
        path = default_filename(channel, now)

    if output_dir and not os.path.isabs(path):
        path = os.path.join(output_dir, path)
    return path
