"""Computes which assets to fetch and which cached ids to retire."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Mapping

from ..models import Asset, ManifestEntry


@dataclass
class AssetDiff:
    to_download: List[Asset] = field(default_factory=list)
    to_remove: List[str] = field(default_factory=list)


def diff_assets(server_assets: Iterable[Asset], manifest: Mapping[str, ManifestEntry]) -> AssetDiff:
    """Diffs the server asset list against the manifest.

    An asset is fetched when it has no manifest entry, or when the server
    declares a checksum different from the recorded one. Without a server
    checksum an existing entry is trusted as-is. ``to_download`` keeps the
    server order and is not deduplicated.
    """

    assets = list(server_assets)
    server_ids = {asset.id for asset in assets}

    to_download = []
    for asset in assets:
        cached = manifest.get(asset.id)
        if cached is None:
            to_download.append(asset)
        elif asset.checksum and cached.checksum != asset.checksum:
            to_download.append(asset)

    to_remove = [asset_id for asset_id in manifest if asset_id not in server_ids]
    return AssetDiff(to_download=to_download, to_remove=to_remove)
