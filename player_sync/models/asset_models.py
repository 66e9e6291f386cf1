"""Pydantic models for the server-declared playlist and its assets."""

from __future__ import annotations

import os
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Asset(BaseModel):
    """One media item of a playlist, immutable once received."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    filename: str = ""
    media_type: str = Field(default="", alias="type")
    url: str
    checksum: Optional[str] = None
    order: Optional[int] = None
    duration: Optional[float] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1]


class Playlist(BaseModel):
    """Playlist body of a config snapshot."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: Optional[str] = None
    assets: List[Asset] = Field(default_factory=list)
    total_duration: Optional[float] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("assets", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ConfigSnapshot(BaseModel):
    """The player config as last fetched from the server."""

    model_config = ConfigDict(extra="allow")

    config_hash: Optional[str] = None
    playlist: Optional[Playlist] = None

    @property
    def assets(self) -> List[Asset]:
        if self.playlist is None:
            return []
        return self.playlist.assets
