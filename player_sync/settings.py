"""Agent settings read from the environment (optionally via a ``.env`` file)."""

from __future__ import annotations

import os

from pydantic import BaseModel

DEFAULT_CACHE_DIR = "/home/signage/ODS/cache"
DEFAULT_SERVER_URL = "https://api.ods-cloud.com"
DEFAULT_ENROLLMENT_FILE = "/var/lib/ods/enrollment.flag"


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return value


def _env_int(name: str) -> int | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _env_float(name: str) -> float | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _env_bool(name: str) -> bool:
    value = _env_str(name)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    cache_dir: str = DEFAULT_CACHE_DIR
    server_url: str = DEFAULT_SERVER_URL
    device_token: str = "system"
    enrollment_file: str = DEFAULT_ENROLLMENT_FILE
    cpuinfo_path: str = "/proc/cpuinfo"
    heartbeat_interval: float = 60.0
    poll_interval: float = 300.0
    initial_sync_delay: float = 5.0
    reconnect_delay: float = 1.0
    reconnect_delay_max: float = 30.0
    request_timeout: float = 30.0
    download_timeout: float = 300.0
    lock_stale_seconds: float = 600.0
    stale_max_age_days: float = 7.0
    log_level: str = "INFO"
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Builds settings from ``PLAYER_*`` variables, keeping defaults for unset ones."""

        values = {
            "cache_dir": _env_str("PLAYER_CACHE_DIR"),
            "server_url": _env_str("PLAYER_SERVER_URL"),
            "device_token": _env_str("PLAYER_DEVICE_TOKEN"),
            "enrollment_file": _env_str("PLAYER_ENROLLMENT_FILE"),
            "cpuinfo_path": _env_str("PLAYER_CPUINFO_PATH"),
            "heartbeat_interval": _env_float("PLAYER_HEARTBEAT_INTERVAL"),
            "poll_interval": _env_float("PLAYER_POLL_INTERVAL"),
            "initial_sync_delay": _env_float("PLAYER_INITIAL_SYNC_DELAY"),
            "reconnect_delay": _env_float("PLAYER_RECONNECT_DELAY"),
            "reconnect_delay_max": _env_float("PLAYER_RECONNECT_DELAY_MAX"),
            "request_timeout": _env_float("PLAYER_REQUEST_TIMEOUT"),
            "download_timeout": _env_float("PLAYER_DOWNLOAD_TIMEOUT"),
            "lock_stale_seconds": _env_int("PLAYER_LOCK_STALE_SECONDS"),
            "stale_max_age_days": _env_float("PLAYER_STALE_MAX_AGE_DAYS"),
            "log_level": _env_str("PLAYER_LOG_LEVEL"),
            "debug": _env_bool("PLAYER_DEBUG"),
        }
        return cls(**{key: value for key, value in values.items() if value is not None})
