"""Data models for playlists, cache bookkeeping, and agent status."""

from .asset_models import Asset, ConfigSnapshot, Playlist
from .cache_models import DownloadOutcome, LockRecord, ManifestEntry, SyncResult
from .status_models import (
    EnrollmentInfo,
    OfflineCapability,
    PlayerStatus,
    RenderableAsset,
    RendererContent,
    SyncState,
)

__all__ = [
    "Asset",
    "Playlist",
    "ConfigSnapshot",
    "ManifestEntry",
    "LockRecord",
    "DownloadOutcome",
    "SyncResult",
    "SyncState",
    "EnrollmentInfo",
    "OfflineCapability",
    "PlayerStatus",
    "RenderableAsset",
    "RendererContent",
]
