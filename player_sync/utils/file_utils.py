"""Filesystem helpers for the cache tree: directories, JSON files, and moves."""

from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

INVALID_FILENAME_CHARS = re.compile(r"[\\/:*?\"<>|]")


def sanitize_filename(value: str, default: str = "file") -> str:
    """Removes characters that are invalid on most filesystems."""

    sanitized = INVALID_FILENAME_CHARS.sub("", value or "").strip()
    return sanitized or default


def ensure_directory(path: str) -> str:
    """Creates a directory (and its parents) if needed."""

    Path(path).mkdir(parents=True, exist_ok=True)
    return path


def iso_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def read_json_file(path: str) -> Optional[Any]:
    """Returns the parsed JSON document at ``path``, or ``None`` if absent or unreadable."""

    try:
        with open(path, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError:
        return None
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
        logging.warning("Failed to read %s: %s", path, exc)
        return None


def write_json_file(path: str, data: Any) -> None:
    """Overwrites ``path`` with ``data`` via a sibling temp file."""

    ensure_directory(os.path.dirname(path) or ".")
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as handle:
        json.dump(data, handle, ensure_ascii=False, indent=2)
    os.replace(tmp_path, path)


def remove_if_exists(path: str) -> bool:
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return False


def move_to_stale(path: str, stale_dir: str) -> str:
    """Moves ``path`` into ``stale_dir`` under its basename and returns the new path.

    The mtime is reset so the stale sweep measures age from displacement.
    """

    ensure_directory(stale_dir)
    stale_path = os.path.join(stale_dir, os.path.basename(path))
    os.replace(path, stale_path)
    os.utime(stale_path, None)
    return stale_path
