"""API client for the player config endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..utils.http_client import HttpClient

CONFIG_HASH_PATH = "api/players/{player_id}/config/hash"
CONFIG_PATH = "api/players/{player_id}/config"


class ConfigAPI:
    """Retrieves the lightweight config hash and the full player config."""

    def __init__(self, http_client: HttpClient) -> None:
        self._client = http_client

    def get_config_hash(self, player_id: str) -> str:
        try:
            data = self._client.request_json(CONFIG_HASH_PATH.format(player_id=player_id))
        except Exception as exc:
            logging.error("Failed to fetch config hash for %s: %s", player_id, exc)
            raise
        config_hash = data.get("config_hash")
        if not isinstance(config_hash, str) or not config_hash:
            raise ValueError(f"Config hash response for {player_id} has no config_hash")
        return config_hash

    def get_config(self, player_id: str) -> Dict[str, Any]:
        try:
            return self._client.request_json(CONFIG_PATH.format(player_id=player_id))
        except Exception as exc:
            logging.error("Failed to fetch config for %s: %s", player_id, exc)
            raise
