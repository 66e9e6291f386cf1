"""Downloads a single asset into staging, verifies it, and swaps it into the good cache."""

from __future__ import annotations

import asyncio
import logging
import os

from ..models import Asset, DownloadOutcome
from ..utils.file_utils import ensure_directory, move_to_stale, remove_if_exists
from ..utils.http_client import DEFAULT_DOWNLOAD_TIMEOUT, HttpClient
from . import checksum
from .layout import CacheLayout


class AssetDownloader:
    """Fetches one asset at a time with an atomic promotion into the good cache.

    The final path only ever holds the previous good file or the new good
    file: the body lands in ``downloading/`` first, a displaced file is moved
    to ``stale/``, and the staged file is renamed into place.
    """

    def __init__(
        self,
        http_client: HttpClient,
        layout: CacheLayout,
        timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
    ) -> None:
        self._http_client = http_client
        self._layout = layout
        self.timeout = timeout

    async def download(self, asset: Asset) -> DownloadOutcome:
        staging_path = self._layout.staging_path(asset)
        final_path = self._layout.final_path(asset)

        try:
            ensure_directory(self._layout.downloading_dir)
            ensure_directory(self._layout.good_cache_dir)
            logging.info("Downloading %s (%s)", asset.filename or asset.url, asset.id)
            await self._http_client.download_stream(asset.url, staging_path, timeout=self.timeout)

            if asset.checksum:
                valid = await asyncio.to_thread(checksum.verify, staging_path, asset.checksum)
                if not valid:
                    remove_if_exists(staging_path)
                    return DownloadOutcome(success=False, error=f"Checksum mismatch for {asset.filename or asset.id}")

            if os.path.exists(final_path):
                stale_path = move_to_stale(final_path, self._layout.stale_dir)
                logging.info("Moved previous version of %s to %s", asset.id, stale_path)
            os.replace(staging_path, final_path)

            file_checksum = asset.checksum or await asyncio.to_thread(checksum.digest, final_path)
            logging.info("Cached %s -> %s", asset.filename or asset.id, final_path)
            return DownloadOutcome(success=True, local_path=final_path, checksum=file_checksum)
        except Exception as exc:
            try:
                remove_if_exists(staging_path)
            except OSError as cleanup_exc:
                logging.warning("Failed to cleanup staging file for %s: %s", asset.id, cleanup_exc)
            logging.error("Failed to cache %s (%s): %s", asset.filename or asset.url, asset.id, exc)
            return DownloadOutcome(success=False, error=str(exc) or exc.__class__.__name__)
