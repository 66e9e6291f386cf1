import os
import tempfile
import time
import unittest

from player_sync.cache import CacheLock


class CacheLockTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "locks", "cache_update.lock")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_acquire_writes_record_and_release_removes_it(self) -> None:
        lock = CacheLock(self.path)
        self.assertTrue(lock.acquire())
        record = lock.read()
        self.assertIsNotNone(record)
        self.assertEqual(record.pid, os.getpid())
        self.assertTrue(lock.is_held())

        lock.release()
        self.assertFalse(os.path.exists(self.path))
        self.assertFalse(lock.is_held())

    def test_fresh_lock_blocks_second_holder(self) -> None:
        first = CacheLock(self.path)
        second = CacheLock(self.path)
        self.assertTrue(first.acquire())
        with self.assertLogs(level="INFO") as logs:
            self.assertFalse(second.acquire())
        self.assertIn(f"pid {os.getpid()}", logs.output[0])

    def test_stale_lock_is_overridden(self) -> None:
        lock = CacheLock(self.path, stale_after=600)
        self.assertTrue(lock.acquire())
        old = time.time() - 601
        os.utime(self.path, (old, old))

        self.assertFalse(lock.is_held())
        self.assertTrue(CacheLock(self.path, stale_after=600).acquire())
        self.assertLess(lock.age(), 60)

    def test_release_is_idempotent(self) -> None:
        lock = CacheLock(self.path)
        lock.release()
        lock.acquire()
        lock.release()
        lock.release()
        self.assertIsNone(lock.age())


if __name__ == "__main__":
    unittest.main()
