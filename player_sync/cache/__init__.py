"""Content cache engine: locking, manifest, diffing, downloads and sync cycles."""

from .asset_downloader import AssetDownloader
from .config_store import ConfigStore
from .diff import AssetDiff, diff_assets
from .layout import CacheLayout
from .lock import CacheLock
from .manifest import ManifestStore
from .offline import OfflineReader, clean_stale_cache
from .orchestrator import SyncOrchestrator, SyncPhase

__all__ = [
    "AssetDownloader",
    "AssetDiff",
    "CacheLayout",
    "CacheLock",
    "ConfigStore",
    "ManifestStore",
    "OfflineReader",
    "SyncOrchestrator",
    "SyncPhase",
    "clean_stale_cache",
    "diff_assets",
]
