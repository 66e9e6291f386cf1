"""Simple helpers for persisting sync state and reading device enrollment."""

from __future__ import annotations

import logging
import re
from typing import Optional

from pydantic import ValidationError

from ..models import EnrollmentInfo, SyncState
from .file_utils import iso_now, read_json_file, write_json_file

UNKNOWN_SERIAL = "UNKNOWN"
CPU_SERIAL_PATTERN = re.compile(r"^Serial\s+:\s+(\w+)", re.MULTILINE)


def load_sync_state(path: str) -> SyncState:
    data = read_json_file(path)
    if not isinstance(data, dict):
        return SyncState()
    try:
        state = SyncState.model_validate(data)
    except ValidationError as exc:
        logging.warning("Ignoring corrupt sync state %s: %s", path, exc)
        return SyncState()
    # a persisted in-progress flag belongs to a previous process
    return state.model_copy(update={"sync_in_progress": False})


def save_sync_state(path: str, state: SyncState) -> None:
    state.updated_at = iso_now()
    try:
        write_json_file(path, state.model_dump(by_alias=True))
        logging.debug("Saved sync state to %s", path)
    except OSError as exc:
        logging.error("Failed to save sync state %s: %s", path, exc)


def load_enrollment(path: str) -> Optional[EnrollmentInfo]:
    data = read_json_file(path)
    if data is None:
        logging.info("No enrollment file at %s; player not enrolled", path)
        return None
    try:
        return EnrollmentInfo.model_validate(data)
    except ValidationError as exc:
        logging.error("Failed to read enrollment file %s: %s", path, exc)
        return None


def read_cpu_serial(cpuinfo_path: str = "/proc/cpuinfo") -> str:
    try:
        with open(cpuinfo_path, "r", encoding="utf-8", errors="ignore") as handle:
            match = CPU_SERIAL_PATTERN.search(handle.read())
    except OSError:
        return UNKNOWN_SERIAL
    return match.group(1) if match else UNKNOWN_SERIAL
