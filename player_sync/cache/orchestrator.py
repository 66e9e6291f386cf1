"""One end-to-end content sync cycle."""

from __future__ import annotations

import asyncio
import logging
import os
from enum import Enum
from typing import List, Optional, Tuple

from ..api.config_api import ConfigAPI
from ..models import Asset, DownloadOutcome, ManifestEntry, SyncResult
from ..utils.file_utils import iso_now, move_to_stale
from .asset_downloader import AssetDownloader
from .config_store import ConfigStore
from .diff import diff_assets
from .layout import CacheLayout
from .lock import CacheLock
from .manifest import Manifest, ManifestStore


class SyncPhase(str, Enum):
    IDLE = "idle"
    LOCKED = "locked"
    CHECKING_HASH = "checking_hash"
    UNCHANGED = "unchanged"
    FETCHING_CONFIG = "fetching_config"
    DIFFING = "diffing"
    DOWNLOADING = "downloading"
    UPDATING_MANIFEST = "updating_manifest"
    REMOVING_STALE = "removing_stale"
    UNLOCKED = "unlocked"


class SyncOrchestrator:
    """Runs lock -> check-hash -> fetch -> diff -> download/swap -> manifest -> stale -> unlock.

    Config/diff errors propagate to the caller after the lock is released;
    per-asset failures are counted and never abort the cycle.
    """

    def __init__(
        self,
        layout: CacheLayout,
        config_api: ConfigAPI,
        downloader: AssetDownloader,
        lock: CacheLock,
        manifest_store: Optional[ManifestStore] = None,
        config_store: Optional[ConfigStore] = None,
    ) -> None:
        self._layout = layout
        self._api = config_api
        self._downloader = downloader
        self._lock = lock
        self._manifest_store = manifest_store or ManifestStore(layout.manifest_file)
        self._config_store = config_store or ConfigStore(layout.config_file)
        self.phase = SyncPhase.IDLE

    def _set_phase(self, phase: SyncPhase) -> None:
        logging.debug("Sync phase %s -> %s", self.phase.value, phase.value)
        self.phase = phase

    async def run(self, player_id: str) -> SyncResult:
        if not self._lock.acquire():
            return SyncResult.skipped("locked", success=False)

        self._set_phase(SyncPhase.LOCKED)
        try:
            self._layout.ensure()

            self._set_phase(SyncPhase.CHECKING_HASH)
            server_hash = await asyncio.to_thread(self._api.get_config_hash, player_id)
            if self._config_store.cached_hash() == server_hash:
                self._set_phase(SyncPhase.UNCHANGED)
                logging.info("Config unchanged (%s), skipping sync", server_hash)
                return SyncResult.skipped("unchanged")

            self._set_phase(SyncPhase.FETCHING_CONFIG)
            payload = await asyncio.to_thread(self._api.get_config, player_id)
            snapshot = self._config_store.save(payload)
            if not snapshot.assets:
                logging.info("No playlist assets, nothing to sync")
                return SyncResult.skipped("no_assets")

            self._set_phase(SyncPhase.DIFFING)
            manifest = self._manifest_store.prune_missing(self._manifest_store.load())
            plan = diff_assets(snapshot.assets, manifest)
            logging.info(
                "Sync plan: %s to download, %s to remove",
                len(plan.to_download),
                len(plan.to_remove),
            )

            self._set_phase(SyncPhase.DOWNLOADING)
            completed: List[Tuple[Asset, DownloadOutcome]] = []
            failed = 0
            for asset in plan.to_download:
                outcome = await self._downloader.download(asset)
                if outcome.success:
                    completed.append((asset, outcome))
                else:
                    failed += 1

            self._set_phase(SyncPhase.UPDATING_MANIFEST)
            for asset, outcome in completed:
                self._record_download(manifest, asset, outcome)

            self._set_phase(SyncPhase.REMOVING_STALE)
            removed = 0
            for asset_id in plan.to_remove:
                entry = manifest.pop(asset_id, None)
                if entry is None:
                    continue
                self._retire_file(entry.local_path)
                removed += 1

            self._manifest_store.save(manifest)

            downloaded = len(completed)
            logging.info("Sync complete: %s downloaded, %s failed, %s removed", downloaded, failed, removed)
            return SyncResult(success=failed == 0, downloaded=downloaded, failed=failed, removed=removed)
        finally:
            self._lock.release()
            self._set_phase(SyncPhase.UNLOCKED)
            self._set_phase(SyncPhase.IDLE)

    def _record_download(self, manifest: Manifest, asset: Asset, outcome: DownloadOutcome) -> None:
        previous = manifest.get(asset.id)
        if previous and previous.local_path != outcome.local_path:
            # filename extension changed between versions
            self._retire_file(previous.local_path)
        manifest[asset.id] = ManifestEntry(
            local_path=outcome.local_path,
            checksum=outcome.checksum,
            filename=asset.filename,
            media_type=asset.media_type,
            downloaded_at=iso_now(),
        )

    def _retire_file(self, path: str) -> None:
        try:
            stale_path = move_to_stale(path, self._layout.stale_dir)
            logging.info("Moved %s to stale area %s", os.path.basename(path), stale_path)
        except FileNotFoundError:
            logging.info("Cached file %s already gone", path)
        except OSError as exc:
            logging.warning("Failed to move %s to stale area: %s", path, exc)
