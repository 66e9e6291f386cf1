"""Persistent Socket.IO control channel to the cloud server."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

import socketio
from socketio import exceptions as socketio_exceptions

from ..models import SyncResult, SyncState
from ..utils.file_utils import iso_now

DEFAULT_RECONNECT_DELAY = 1.0
DEFAULT_RECONNECT_DELAY_MAX = 30.0
TRANSPORTS = ["websocket", "polling"]


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    REGISTERED = "registered"


class CloudConnection:
    """Registers the player, relays deploy pushes and reports sync outcomes.

    The underlying client reconnects forever with exponential backoff between
    ``reconnect_delay`` and ``reconnect_delay_max``; ``stop()`` aborts any
    pending reconnect attempt.
    """

    def __init__(
        self,
        server_url: str,
        hardware_id: str,
        device_id: str,
        state: SyncState,
        on_sync_requested: Callable[[str], Any],
        on_state_changed: Optional[Callable[[], None]] = None,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        reconnect_delay_max: float = DEFAULT_RECONNECT_DELAY_MAX,
        sio: Optional[socketio.AsyncClient] = None,
    ) -> None:
        self.server_url = server_url
        self.hardware_id = hardware_id
        self.device_id = device_id
        self.state = state
        self.connection_state = ConnectionState.DISCONNECTED
        self._on_sync_requested = on_sync_requested
        self._on_state_changed = on_state_changed
        self._task: Optional[asyncio.Task] = None

        self._sio = sio or socketio.AsyncClient(
            reconnection=True,
            reconnection_attempts=0,
            reconnection_delay=reconnect_delay,
            reconnection_delay_max=reconnect_delay_max,
            logger=False,
            engineio_logger=False,
        )
        self._sio.on("connect", self._on_connect)
        self._sio.on("disconnect", self._on_disconnect)
        self._sio.on("connect_error", self._on_connect_error)
        self._sio.on("registered", self._on_registered)
        self._sio.on("deploy_playlist", self._on_deploy)

    @property
    def registration_name(self) -> str:
        return f"Atlas-{self.hardware_id[-6:]}"

    @property
    def connected(self) -> bool:
        return self._sio.connected and self.connection_state in {
            ConnectionState.CONNECTED,
            ConnectionState.REGISTERED,
        }

    @property
    def registered(self) -> bool:
        return self.connection_state == ConnectionState.REGISTERED

    async def start(self) -> None:
        if self._task and not self._task.done():
            logging.warning("Cloud connection already running")
            return
        self._set_state(ConnectionState.CONNECTING)
        logging.info("Connecting to %s...", self.server_url)
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        try:
            await self._sio.connect(self.server_url, transports=TRANSPORTS, retry=True)
            await self._sio.wait()
        except socketio_exceptions.ConnectionError as exc:
            logging.warning("Cloud connection ended: %s", exc)
        finally:
            self._set_state(ConnectionState.DISCONNECTED)

    async def stop(self) -> None:
        await self._sio.shutdown()
        if self._task:
            if not self._task.done():
                self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._set_state(ConnectionState.DISCONNECTED)
        self._mark_online(False)
        logging.info("Cloud connection stopped")

    async def emit(self, event: str, data: Dict[str, Any]) -> bool:
        """Best-effort emit; returns ``False`` when offline or the send fails."""

        if not self.connected:
            return False
        try:
            await self._sio.emit(event, data)
            return True
        except Exception as exc:
            logging.warning("Failed to emit %s: %s", event, exc)
            return False

    async def send_heartbeat(self) -> bool:
        return await self.emit("heartbeat", {"timestamp": iso_now()})

    async def report_sync_result(self, result: SyncResult) -> bool:
        if result.reason == "error":
            payload: Dict[str, Any] = {"status": "error", "error": result.error, "timestamp": iso_now()}
        else:
            payload = {
                "status": "complete" if result.success else "partial",
                "downloaded": result.downloaded,
                "failed": result.failed,
                "removed": result.removed,
                "timestamp": self.state.last_sync_time or iso_now(),
            }
        return await self.emit("sync_status", payload)

    async def _on_connect(self) -> None:
        logging.info("Connected to cloud server")
        self._set_state(ConnectionState.CONNECTED)
        self._mark_online(True)
        await self._sio.emit(
            "register",
            {
                "hardwareId": self.hardware_id,
                "deviceId": self.device_id,
                "name": self.registration_name,
            },
        )

    async def _on_registered(self, data: Optional[Dict[str, Any]] = None) -> None:
        data = data or {}
        player_id = data.get("id")
        if not player_id:
            logging.warning("Registration acknowledgement without player id: %s", data)
            return
        self.state.player_id = str(player_id)
        self._set_state(ConnectionState.REGISTERED)
        logging.info("Registered as player %s (%s)", data.get("name"), self.state.player_id)
        self._notify_state_changed()
        self._on_sync_requested("registered")

    async def _on_disconnect(self, reason: Any = None) -> None:
        logging.info("Disconnected from cloud server: %s", reason)
        self._set_state(ConnectionState.DISCONNECTED)
        self._mark_online(False)

    async def _on_connect_error(self, data: Any = None) -> None:
        logging.info("Connection error: %s", data)
        self._mark_online(False)

    async def _on_deploy(self, data: Any = None) -> None:
        logging.info("Deploy push received: %s", data)
        self._on_sync_requested("deploy")

    def _set_state(self, new_state: ConnectionState) -> None:
        if new_state != self.connection_state:
            logging.debug("Connection state %s -> %s", self.connection_state.value, new_state.value)
            self.connection_state = new_state

    def _mark_online(self, online: bool) -> None:
        if self.state.is_online == online:
            return
        self.state.is_online = online
        self._notify_state_changed()

    def _notify_state_changed(self) -> None:
        if self._on_state_changed:
            self._on_state_changed()
