"""Models for agent state, enrollment and the status/renderer views."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .asset_models import ConfigSnapshot


class SyncState(BaseModel):
    """Process-wide sync state that survives restarts."""

    model_config = ConfigDict(populate_by_name=True)

    last_sync_time: Optional[str] = Field(default=None, alias="lastSyncTime")
    is_online: bool = Field(default=False, alias="isOnline")
    player_id: Optional[str] = Field(default=None, alias="playerId")
    sync_in_progress: bool = Field(default=False, alias="syncInProgress")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


class EnrollmentInfo(BaseModel):
    """Enrollment record written by the device provisioning step."""

    model_config = ConfigDict(extra="allow")

    device_uuid: str
    pairing_code: Optional[str] = None
    timestamp: Optional[str] = None


class OfflineCapability(BaseModel):
    can_operate: bool
    config: Optional[ConfigSnapshot] = None
    asset_count: int = 0


class PlayerStatus(BaseModel):
    """Status record exposed to the local HTTP layer."""

    model_config = ConfigDict(populate_by_name=True)

    is_online: bool = Field(alias="isOnline")
    is_connected: bool = Field(alias="isConnected")
    connection_state: str = Field(alias="connectionState")
    player_id: Optional[str] = Field(default=None, alias="playerId")
    last_sync_time: Optional[str] = Field(default=None, alias="lastSyncTime")
    sync_in_progress: bool = Field(alias="syncInProgress")
    cached_assets: int = Field(alias="cachedAssets")
    can_play_offline: bool = Field(alias="canPlayOffline")


class RenderableAsset(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    media_type: str = Field(default="", alias="type")
    filename: str = ""
    local_path: Optional[str] = Field(default=None, alias="localPath")
    duration: float = 10
    order: Optional[int] = None
    available: bool = False


class RendererContent(BaseModel):
    """Current playlist restricted to assets resolvable on disk."""

    playlist_id: Optional[str] = None
    playlist_name: Optional[str] = None
    total_duration: Optional[float] = None
    config_hash: Optional[str] = None
    assets: List[RenderableAsset] = Field(default_factory=list)
