import asyncio
import unittest

from player_sync.cloud import SyncScheduler
from player_sync.models import SyncState


class StubConnection:
    def __init__(self, player_id=None, connected=True, registered=True) -> None:
        self.state = SyncState(player_id=player_id)
        self.connected = connected
        self.registered = registered
        self.heartbeats = 0

    async def send_heartbeat(self) -> bool:
        self.heartbeats += 1
        return True


class SyncSchedulerTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.requests = []

    def _scheduler(self, connection: StubConnection, **kwargs) -> SyncScheduler:
        options = {"heartbeat_interval": 0.02, "poll_interval": 0.03, "initial_delay": 0.01}
        options.update(kwargs)
        return SyncScheduler(connection, self.requests.append, **options)

    async def test_heartbeat_and_poll_fire_while_registered(self) -> None:
        connection = StubConnection()
        scheduler = self._scheduler(connection)
        scheduler.start()
        await asyncio.sleep(0.2)
        await scheduler.stop()

        self.assertGreater(connection.heartbeats, 1)
        self.assertIn("poll", self.requests)
        self.assertNotIn("startup", self.requests)
        self.assertFalse(scheduler.running)

    async def test_poll_waits_for_registration(self) -> None:
        connection = StubConnection(registered=False)
        scheduler = self._scheduler(connection)
        scheduler.start()
        await asyncio.sleep(0.15)
        await scheduler.stop()

        self.assertEqual(self.requests, [])
        self.assertGreater(connection.heartbeats, 0)

    async def test_offline_skips_heartbeats(self) -> None:
        connection = StubConnection(connected=False)
        scheduler = self._scheduler(connection)
        scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()

        self.assertEqual(connection.heartbeats, 0)
        self.assertEqual(self.requests, [])

    async def test_known_player_gets_startup_sync(self) -> None:
        connection = StubConnection(player_id="p1", connected=False)
        scheduler = self._scheduler(connection, poll_interval=10)
        scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()

        self.assertEqual(self.requests, ["startup"])

    async def test_stop_before_startup_delay_cancels_it(self) -> None:
        connection = StubConnection(player_id="p1")
        scheduler = self._scheduler(connection, initial_delay=10, poll_interval=10, heartbeat_interval=10)
        scheduler.start()
        await asyncio.sleep(0.02)
        await scheduler.stop()

        self.assertEqual(self.requests, [])


if __name__ == "__main__":
    unittest.main()
