import asyncio
import unittest

from player_sync.cloud import CloudConnection, ConnectionState
from player_sync.models import SyncResult, SyncState

from helpers import FakeSio


class CloudConnectionTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.sio = FakeSio()
        self.state = SyncState()
        self.sync_requests = []
        self.state_changes = 0
        self.connection = CloudConnection(
            "http://cloud.test",
            hardware_id="10000000abcdef12",
            device_id="device-uuid",
            state=self.state,
            on_sync_requested=self.sync_requests.append,
            on_state_changed=self._state_changed,
            sio=self.sio,
        )

    def _state_changed(self) -> None:
        self.state_changes += 1

    async def _connect(self) -> None:
        await self.connection.start()
        for _ in range(100):
            if self.connection.connected:
                return
            await asyncio.sleep(0.01)

    async def asyncTearDown(self) -> None:
        await self.connection.stop()

    async def test_connect_registers_with_hardware_identity(self) -> None:
        await self._connect()

        self.assertEqual(self.connection.connection_state, ConnectionState.CONNECTED)
        self.assertTrue(self.state.is_online)
        self.assertEqual(
            self.sio.events("register"),
            [{"hardwareId": "10000000abcdef12", "deviceId": "device-uuid", "name": "Atlas-cdef12"}],
        )

    async def test_registered_ack_stores_player_and_requests_sync(self) -> None:
        await self._connect()
        await self.sio.trigger("registered", {"id": 42, "name": "Lobby screen"})

        self.assertEqual(self.state.player_id, "42")
        self.assertTrue(self.connection.registered)
        self.assertEqual(self.sync_requests, ["registered"])
        self.assertGreaterEqual(self.state_changes, 2)

    async def test_registered_ack_without_id_is_ignored(self) -> None:
        await self._connect()
        await self.sio.trigger("registered", {"name": "no id"})

        self.assertIsNone(self.state.player_id)
        self.assertFalse(self.connection.registered)
        self.assertEqual(self.sync_requests, [])

    async def test_deploy_push_requests_sync(self) -> None:
        await self._connect()
        await self.sio.trigger("deploy_playlist", {"playlistId": "p1"})
        self.assertEqual(self.sync_requests, ["deploy"])

    async def test_disconnect_marks_offline(self) -> None:
        await self._connect()
        await self.sio.trigger("disconnect", "transport close")

        self.assertFalse(self.state.is_online)
        self.assertEqual(self.connection.connection_state, ConnectionState.DISCONNECTED)
        self.assertFalse(self.connection.connected)

    async def test_sync_report_payloads(self) -> None:
        await self._connect()
        self.state.last_sync_time = "2026-10-19T10:00:00.000Z"

        await self.connection.report_sync_result(SyncResult(success=True, downloaded=2, removed=1))
        await self.connection.report_sync_result(SyncResult(success=False, downloaded=1, failed=1))
        await self.connection.report_sync_result(SyncResult(success=False, reason="error", error="boom"))

        reports = self.sio.events("sync_status")
        self.assertEqual(
            reports[0],
            {"status": "complete", "downloaded": 2, "failed": 0, "removed": 1, "timestamp": "2026-10-19T10:00:00.000Z"},
        )
        self.assertEqual(reports[1]["status"], "partial")
        self.assertEqual(reports[2]["status"], "error")
        self.assertEqual(reports[2]["error"], "boom")
        self.assertIn("timestamp", reports[2])

    async def test_emit_while_offline_is_dropped(self) -> None:
        self.assertFalse(await self.connection.send_heartbeat())
        self.assertFalse(await self.connection.report_sync_result(SyncResult(success=True)))
        self.assertEqual(self.sio.emitted, [])

    async def test_stop_shuts_down_client(self) -> None:
        await self._connect()
        await self.connection.stop()

        self.assertTrue(self.sio.shutdown_called)
        self.assertFalse(self.state.is_online)
        self.assertEqual(self.connection.connection_state, ConnectionState.DISCONNECTED)


if __name__ == "__main__":
    unittest.main()
