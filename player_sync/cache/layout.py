"""Directory layout of the on-device content cache."""

from __future__ import annotations

import logging
import os

from ..models import Asset
from ..utils.file_utils import ensure_directory, sanitize_filename

CONFIG_FILENAME = "player_config.json"
MANIFEST_FILENAME = "manifest.json"
LOCK_FILENAME = "cache_update.lock"
STATE_FILENAME = "sync_state.json"


class CacheLayout:
    """Resolves every path of the cache tree from a single root directory.

    ::

        <root>/
        ├── config/player_config.json
        ├── content/
        │   ├── good_cache/{asset_id}{ext} + manifest.json
        │   ├── downloading/
        │   └── stale/
        ├── locks/cache_update.lock
        └── state/sync_state.json
    """

    def __init__(self, root: str) -> None:
        self.root = os.path.abspath(root)
        self.config_dir = os.path.join(self.root, "config")
        self.content_dir = os.path.join(self.root, "content")
        self.good_cache_dir = os.path.join(self.content_dir, "good_cache")
        self.downloading_dir = os.path.join(self.content_dir, "downloading")
        self.stale_dir = os.path.join(self.content_dir, "stale")
        self.locks_dir = os.path.join(self.root, "locks")
        self.state_dir = os.path.join(self.root, "state")

        self.config_file = os.path.join(self.config_dir, CONFIG_FILENAME)
        self.manifest_file = os.path.join(self.good_cache_dir, MANIFEST_FILENAME)
        self.lock_file = os.path.join(self.locks_dir, LOCK_FILENAME)
        self.state_file = os.path.join(self.state_dir, STATE_FILENAME)

    def ensure(self) -> None:
        for directory in (
            self.config_dir,
            self.good_cache_dir,
            self.downloading_dir,
            self.stale_dir,
            self.locks_dir,
            self.state_dir,
        ):
            if not os.path.isdir(directory):
                ensure_directory(directory)
                logging.info("Created cache directory %s", directory)

    def asset_filename(self, asset: Asset) -> str:
        return f"{sanitize_filename(asset.id, default='asset')}{asset.extension}"

    def staging_path(self, asset: Asset) -> str:
        return os.path.join(self.downloading_dir, self.asset_filename(asset))

    def final_path(self, asset: Asset) -> str:
        return os.path.join(self.good_cache_dir, self.asset_filename(asset))
