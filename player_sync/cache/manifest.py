"""JSON-backed manifest mapping asset ids to verified files in the good cache."""

from __future__ import annotations

import logging
import os
from typing import Dict

from pydantic import ValidationError

from ..models import ManifestEntry
from ..utils.file_utils import read_json_file, write_json_file

Manifest = Dict[str, ManifestEntry]


class ManifestStore:
    def __init__(self, path: str) -> None:
        self.path = path

    def load(self) -> Manifest:
        """Returns the manifest; a missing or corrupt file reads as empty."""

        payload = read_json_file(self.path)
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            logging.warning("Manifest %s is not an object; treating as empty", self.path)
            return {}
        try:
            return {asset_id: ManifestEntry.model_validate(entry) for asset_id, entry in payload.items()}
        except ValidationError as exc:
            logging.warning("Manifest %s is corrupt; treating as empty: %s", self.path, exc)
            return {}

    def save(self, manifest: Manifest) -> None:
        payload = {asset_id: entry.model_dump(by_alias=True) for asset_id, entry in manifest.items()}
        write_json_file(self.path, payload)

    def prune_missing(self, manifest: Manifest) -> Manifest:
        """Drops entries whose file disappeared from disk."""

        missing = [asset_id for asset_id, entry in manifest.items() if not os.path.exists(entry.local_path)]
        for asset_id in missing:
            logging.warning("Cached file for %s is missing; dropping manifest entry", asset_id)
            manifest.pop(asset_id, None)
        return manifest
