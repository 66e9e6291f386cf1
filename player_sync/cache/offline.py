"""Read-only access to cached state for offline playback."""

from __future__ import annotations

import logging
import os
import time
from typing import Optional

from ..models import ConfigSnapshot, OfflineCapability, RenderableAsset, RendererContent
from .config_store import ConfigStore
from .layout import CacheLayout
from .manifest import ManifestStore

SECONDS_PER_DAY = 24 * 60 * 60
DEFAULT_STALE_MAX_AGE_DAYS = 7
DEFAULT_ASSET_DURATION = 10


class OfflineReader:
    """Answers cache questions from disk alone; never mutates the cache."""

    def __init__(
        self,
        layout: CacheLayout,
        manifest_store: Optional[ManifestStore] = None,
        config_store: Optional[ConfigStore] = None,
    ) -> None:
        self._layout = layout
        self._manifest_store = manifest_store or ManifestStore(layout.manifest_file)
        self._config_store = config_store or ConfigStore(layout.config_file)

    def get_cached_config(self) -> Optional[ConfigSnapshot]:
        return self._config_store.load()

    def get_cached_asset_path(self, asset_id: str) -> Optional[str]:
        entry = self._manifest_store.load().get(asset_id)
        if entry is None:
            return None
        if not os.path.exists(entry.local_path):
            return None
        return entry.local_path

    def check_offline_capability(self) -> OfflineCapability:
        config = self.get_cached_config()
        asset_count = len(self._manifest_store.load())
        return OfflineCapability(
            can_operate=config is not None and asset_count > 0,
            config=config,
            asset_count=asset_count,
        )

    def get_renderer_content(self) -> Optional[RendererContent]:
        """Current playlist with local paths, limited to assets available on disk."""

        config = self.get_cached_config()
        if config is None or config.playlist is None:
            return None

        manifest = self._manifest_store.load()
        assets = []
        for asset in config.playlist.assets:
            entry = manifest.get(asset.id)
            local_path = entry.local_path if entry and os.path.exists(entry.local_path) else None
            if local_path is None:
                continue
            assets.append(
                RenderableAsset(
                    id=asset.id,
                    media_type=asset.media_type,
                    filename=asset.filename,
                    local_path=local_path,
                    duration=asset.duration or DEFAULT_ASSET_DURATION,
                    order=asset.order,
                    available=True,
                )
            )

        return RendererContent(
            playlist_id=config.playlist.id,
            playlist_name=config.playlist.name,
            total_duration=config.playlist.total_duration,
            config_hash=config.config_hash,
            assets=assets,
        )


def clean_stale_cache(stale_dir: str, max_age_days: float = DEFAULT_STALE_MAX_AGE_DAYS) -> int:
    """Deletes files in the stale area older than ``max_age_days``; returns how many."""

    if not os.path.isdir(stale_dir):
        return 0

    max_age_seconds = max_age_days * SECONDS_PER_DAY
    now = time.time()
    cleaned = 0
    for name in os.listdir(stale_dir):
        path = os.path.join(stale_dir, name)
        if not os.path.isfile(path):
            continue
        try:
            if now - os.path.getmtime(path) > max_age_seconds:
                os.remove(path)
                cleaned += 1
        except FileNotFoundError:
            continue
        except OSError as exc:
            logging.warning("Failed to remove stale file %s: %s", path, exc)

    if cleaned:
        logging.info("Cleaned %s stale files", cleaned)
    return cleaned
