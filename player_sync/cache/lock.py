"""File-backed lock that keeps sync cycles from overlapping."""

from __future__ import annotations

import logging
import os
import time
from typing import Optional

from ..models import LockRecord
from ..utils.file_utils import ensure_directory, iso_now, read_json_file, remove_if_exists, write_json_file

DEFAULT_STALE_SECONDS = 10 * 60


class CacheLock:
    """Guards the whole cache tree with a lock record and a staleness timeout.

    Presence of the lock file plus its mtime age is the only primitive, so a
    crashed cycle heals itself once the record is older than ``stale_after``.
    """

    def __init__(self, path: str, stale_after: float = DEFAULT_STALE_SECONDS) -> None:
        self.path = path
        self.stale_after = stale_after

    def age(self) -> Optional[float]:
        try:
            return time.time() - os.path.getmtime(self.path)
        except FileNotFoundError:
            return None

    def is_held(self) -> bool:
        age = self.age()
        return age is not None and age < self.stale_after

    def acquire(self) -> bool:
        if self.is_held():
            holder = self.read()
            logging.info(
                "Cache lock held by pid %s since %s, skipping update",
                holder.pid if holder else "?",
                holder.timestamp if holder else "?",
            )
            return False

        age = self.age()
        if age is not None:
            logging.warning("Stale cache lock detected (age %.0fs), overriding", age)

        ensure_directory(os.path.dirname(self.path))
        record = LockRecord(pid=os.getpid(), timestamp=iso_now())
        write_json_file(self.path, record.model_dump())
        return True

    def release(self) -> None:
        if remove_if_exists(self.path):
            logging.debug("Released cache lock %s", self.path)

    def read(self) -> Optional[LockRecord]:
        data = read_json_file(self.path)
        if not isinstance(data, dict):
            return None
        try:
            return LockRecord.model_validate(data)
        except ValueError:
            return None
