"""Utility helpers for HTTP and filesystem operations."""

from .http_client import HttpClient
from .file_utils import ensure_directory, resolve_output_path, sanitize_filename

__all__ = ["HttpClient", "ensure_directory", "resolve_output_path", "sanitize_filename"]
