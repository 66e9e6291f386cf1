"""Models persisted by the content cache and returned by sync cycles."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ManifestEntry(BaseModel):
    """A verified file in the good cache, keyed by asset id in the manifest."""

    model_config = ConfigDict(populate_by_name=True)

    local_path: str = Field(alias="localPath")
    checksum: str
    filename: str = ""
    media_type: str = Field(default="", alias="type")
    downloaded_at: str = Field(alias="downloadedAt")


class LockRecord(BaseModel):
    """Contents of the cache lock file."""

    pid: int
    timestamp: str


class DownloadOutcome(BaseModel):
    """Result of fetching and promoting a single asset."""

    success: bool
    local_path: Optional[str] = None
    checksum: Optional[str] = None
    error: Optional[str] = None


class SyncResult(BaseModel):
    """Outcome of one sync cycle.

    ``reason`` is set for no-op outcomes (``locked``, ``unchanged``,
    ``no_assets``, ``not_registered``) and for aborted cycles (``error``).
    """

    success: bool
    downloaded: int = 0
    failed: int = 0
    removed: int = 0
    reason: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def skipped(cls, reason: str, success: bool = True) -> "SyncResult":
        return cls(success=success, reason=reason)

    @property
    def content_changed(self) -> bool:
        return self.downloaded > 0 or self.removed > 0
