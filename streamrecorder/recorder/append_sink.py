"""Append-only output file for recorded segment bytes."""

from __future__ import annotations

import logging
import os
from typing import BinaryIO, Optional

from ..errors import OutputIOError
from ..utils.file_utils import ensure_directory

STAGE = "file I/O"


class AppendSink:
    """Opens ``path`` once and appends whole segments, flushing after each one."""

    def __init__(self, path: str, fsync: bool = True) -> None:
        self.path = path
        self.fsync = fsync
        self.bytes_written = 0
        self._handle: Optional[BinaryIO] = None

    @property
    def closed(self) -> bool:
        return self._handle is None

    def open(self) -> "AppendSink":
        if self._handle is not None:
            return self
        try:
            ensure_directory(os.path.dirname(os.path.abspath(self.path)) or ".")
            self._handle = open(self.path, "ab", buffering=0)
        except OSError as exc:
            logging.error("Cannot open %s for appending: %s", self.path, exc)
            raise OutputIOError(f"cannot open '{self.path}': {exc}", stage=STAGE) from exc
        logging.debug("Appending to %s", self.path)
        return self

    def write(self, data: bytes) -> int:
        if self._handle is None:
            raise OutputIOError(f"'{self.path}' is not open", stage=STAGE)
        try:
            written = self._handle.write(data)
            if written is None or written != len(data):
                raise OutputIOError(
                    f"short write to '{self.path}': {written or 0} of {len(data)} bytes",
                    stage=STAGE,
                )
            self._handle.flush()
            if self.fsync:
                os.fsync(self._handle.fileno())
        except OutputIOError:
            logging.error("Short write to %s", self.path)
            raise
        except OSError as exc:
            logging.error("Write to %s failed: %s", self.path, exc)
            raise OutputIOError(f"write to '{self.path}' failed: {exc}", stage=STAGE) from exc

        self.bytes_written += written
        return written

    def close(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        try:
            handle.close()
        except OSError as exc:
            logging.error("Closing %s failed: %s", self.path, exc)
            raise OutputIOError(f"cannot close '{self.path}': {exc}", stage=STAGE) from exc

    def __enter__(self) -> "AppendSink":
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
