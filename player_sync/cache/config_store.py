"""Persistence of the current config snapshot."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..models import ConfigSnapshot
from ..utils.file_utils import read_json_file, write_json_file


class ConfigStore:
    def __init__(self, path: str) -> None:
        self.path = path

    def load(self) -> Optional[ConfigSnapshot]:
        payload = read_json_file(self.path)
        if not isinstance(payload, dict):
            return None
        try:
            return ConfigSnapshot.model_validate(payload)
        except ValidationError as exc:
            logging.warning("Cached config %s is corrupt; ignoring: %s", self.path, exc)
            return None

    def cached_hash(self) -> Optional[str]:
        snapshot = self.load()
        return snapshot.config_hash if snapshot else None

    def save(self, payload: Dict[str, Any]) -> ConfigSnapshot:
        """Validates the server payload, writes it verbatim, and returns the parsed snapshot."""

        snapshot = ConfigSnapshot.model_validate(payload)
        write_json_file(self.path, payload)
        logging.info("Config saved: %s", snapshot.config_hash)
        return snapshot
