import os
import tempfile
import time
import unittest

from player_sync.cache import CacheLayout, ConfigStore, ManifestStore, OfflineReader, clean_stale_cache
from player_sync.models import ManifestEntry

from helpers import make_asset, make_config


class OfflineReaderTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.layout = CacheLayout(self._tmp.name)
        self.layout.ensure()
        self.reader = OfflineReader(self.layout)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _cache(self, asset_id: str, data: bytes = b"x") -> str:
        path = os.path.join(self.layout.good_cache_dir, f"{asset_id}.mp4")
        with open(path, "wb") as handle:
            handle.write(data)
        store = ManifestStore(self.layout.manifest_file)
        manifest = store.load()
        manifest[asset_id] = ManifestEntry(
            local_path=path,
            checksum="sha256:00",
            filename=f"{asset_id}.mp4",
            media_type="video",
            downloaded_at="2026-01-01T00:00:00.000Z",
        )
        store.save(manifest)
        return path

    def test_empty_cache_cannot_operate(self) -> None:
        capability = self.reader.check_offline_capability()
        self.assertFalse(capability.can_operate)
        self.assertEqual(capability.asset_count, 0)
        self.assertIsNone(self.reader.get_renderer_content())

    def test_cached_asset_path_requires_file_on_disk(self) -> None:
        path = self._cache("a")
        self.assertEqual(self.reader.get_cached_asset_path("a"), path)
        os.remove(path)
        self.assertIsNone(self.reader.get_cached_asset_path("a"))
        self.assertIsNone(self.reader.get_cached_asset_path("unknown"))

    def test_renderer_content_lists_only_available_assets(self) -> None:
        assets = [
            make_asset("a", b"x", order=1, duration=15),
            make_asset("b", b"x", order=2),
        ]
        ConfigStore(self.layout.config_file).save(make_config("h1", assets))
        path = self._cache("a")

        capability = self.reader.check_offline_capability()
        self.assertTrue(capability.can_operate)
        self.assertEqual(capability.config.config_hash, "h1")

        content = self.reader.get_renderer_content()
        self.assertEqual(content.playlist_name, "Lobby")
        self.assertEqual(content.config_hash, "h1")
        self.assertEqual([asset.id for asset in content.assets], ["a"])
        self.assertEqual(content.assets[0].local_path, path)
        self.assertEqual(content.assets[0].duration, 15)
        self.assertTrue(content.assets[0].available)

        self._cache("b")
        content = self.reader.get_renderer_content()
        self.assertEqual(content.assets[1].duration, 10)


class CleanStaleTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.stale_dir = os.path.join(self._tmp.name, "stale")
        os.makedirs(self.stale_dir)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _touch(self, name: str, age_days: float) -> str:
        path = os.path.join(self.stale_dir, name)
        with open(path, "wb") as handle:
            handle.write(b"old")
        mtime = time.time() - age_days * 24 * 60 * 60
        os.utime(path, (mtime, mtime))
        return path

    def test_removes_only_files_past_max_age(self) -> None:
        old = self._touch("old.mp4", 8)
        recent = self._touch("recent.mp4", 1)

        self.assertEqual(clean_stale_cache(self.stale_dir, max_age_days=7), 1)
        self.assertFalse(os.path.exists(old))
        self.assertTrue(os.path.exists(recent))

    def test_missing_stale_dir_is_noop(self) -> None:
        self.assertEqual(clean_stale_cache(os.path.join(self._tmp.name, "nope")), 0)


if __name__ == "__main__":
    unittest.main()
