"""Utility helpers for HTTP, filesystem and state persistence."""

from .file_utils import ensure_directory, iso_now, move_to_stale, read_json_file, sanitize_filename, write_json_file
from .http_client import AuthenticationError, HttpClient, HttpStatusError

__all__ = [
    "AuthenticationError",
    "HttpClient",
    "HttpStatusError",
    "ensure_directory",
    "iso_now",
    "move_to_stale",
    "read_json_file",
    "sanitize_filename",
    "write_json_file",
]
