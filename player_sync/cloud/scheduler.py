"""Time-driven heartbeat and config-poll triggers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional

from .connection import CloudConnection

DEFAULT_HEARTBEAT_INTERVAL = 60.0
DEFAULT_POLL_INTERVAL = 5 * 60.0
DEFAULT_INITIAL_DELAY = 5.0


class SyncScheduler:
    """Runs the heartbeat timer, the poll timer and the one-shot startup sync.

    Polling is the fallback when a deploy push is missed: it only requests a
    sync while the connection is up and registered.
    """

    def __init__(
        self,
        connection: CloudConnection,
        request_sync: Callable[[str], Any],
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
    ) -> None:
        self.connection = connection
        self.heartbeat_interval = heartbeat_interval
        self.poll_interval = poll_interval
        self.initial_delay = initial_delay
        self._request_sync = request_sync
        self._tasks: List[asyncio.Task] = []
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self) -> None:
        if self.running:
            logging.warning("Sync scheduler already running")
            return

        self._stop_event = asyncio.Event()
        self._tasks = [
            asyncio.create_task(self._heartbeat_loop()),
            asyncio.create_task(self._poll_loop()),
        ]
        if self.connection.state.player_id:
            self._tasks.append(asyncio.create_task(self._initial_sync()))
        logging.info(
            "Sync scheduler started (heartbeat %ss, poll %ss)",
            self.heartbeat_interval,
            self.poll_interval,
        )

    async def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logging.info("Sync scheduler stopped")

    async def _wait_or_stop(self, seconds: float) -> bool:
        """Sleeps up to ``seconds``; returns ``True`` if the scheduler was stopped meanwhile."""

        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
            return True
        except asyncio.TimeoutError:
            return False

    async def _heartbeat_loop(self) -> None:
        while not await self._wait_or_stop(self.heartbeat_interval):
            if self.connection.connected:
                await self.connection.send_heartbeat()

    async def _poll_loop(self) -> None:
        while not await self._wait_or_stop(self.poll_interval):
            if self.connection.connected and self.connection.registered:
                logging.debug("Config poll tick")
                self._request_sync("poll")

    async def _initial_sync(self) -> None:
        if not await self._wait_or_stop(self.initial_delay):
            logging.info("Running startup sync for known player %s", self.connection.state.player_id)
            self._request_sync("startup")
