"""Cloud sync client: owns the cache engine, the control channel and the timers."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Set

from ..api.config_api import ConfigAPI
from ..cache import (
    AssetDownloader,
    CacheLayout,
    CacheLock,
    OfflineReader,
    SyncOrchestrator,
    clean_stale_cache,
)
from ..models import PlayerStatus, RendererContent, SyncResult, SyncState
from ..settings import Settings
from ..utils.file_utils import iso_now
from ..utils.http_client import HttpClient
from ..utils.state_store import load_enrollment, load_sync_state, read_cpu_serial, save_sync_state
from .connection import CloudConnection, ConnectionState
from .scheduler import SyncScheduler

UNREPORTED_REASONS = {"locked", "not_registered"}


class PlayerSyncClient:
    """Session object for one agent instance.

    Everything that would otherwise be process-wide (socket, flags, timers,
    player identity) lives here so several clients can coexist in tests.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[HttpClient] = None,
        on_content_ready: Optional[Callable[[], None]] = None,
        sio_factory: Optional[Callable[[], object]] = None,
    ) -> None:
        self.settings = settings
        self.layout = CacheLayout(settings.cache_dir)
        self.layout.ensure()
        self.state = load_sync_state(self.layout.state_file)

        self._http_client = http_client or HttpClient(
            settings.server_url,
            settings.device_token,
            timeout=settings.request_timeout,
            download_timeout=settings.download_timeout,
        )
        self.orchestrator = SyncOrchestrator(
            self.layout,
            ConfigAPI(self._http_client),
            AssetDownloader(self._http_client, self.layout, timeout=settings.download_timeout),
            CacheLock(self.layout.lock_file, stale_after=settings.lock_stale_seconds),
        )
        self.offline = OfflineReader(self.layout)
        self.connection: Optional[CloudConnection] = None
        self.scheduler: Optional[SyncScheduler] = None

        self._on_content_ready = on_content_ready
        self._sio_factory = sio_factory
        self._pending: Set[asyncio.Task] = set()

    async def start(self) -> bool:
        """Connects to the server and starts the timers; returns ``False`` when not enrolled."""

        enrollment = load_enrollment(self.settings.enrollment_file)
        if enrollment is None:
            logging.info("Skipping cloud sync: player not enrolled")
            return False

        self.connection = CloudConnection(
            self.settings.server_url,
            hardware_id=read_cpu_serial(self.settings.cpuinfo_path),
            device_id=enrollment.device_uuid,
            state=self.state,
            on_sync_requested=self.request_sync,
            on_state_changed=self.persist_state,
            reconnect_delay=self.settings.reconnect_delay,
            reconnect_delay_max=self.settings.reconnect_delay_max,
            sio=self._sio_factory() if self._sio_factory else None,
        )
        self.scheduler = SyncScheduler(
            self.connection,
            self.request_sync,
            heartbeat_interval=self.settings.heartbeat_interval,
            poll_interval=self.settings.poll_interval,
            initial_delay=self.settings.initial_sync_delay,
        )
        await self.connection.start()
        self.scheduler.start()
        return True

    async def stop(self) -> None:
        if self.scheduler:
            await self.scheduler.stop()
        if self.connection:
            await self.connection.stop()
        if self._pending:
            # in-flight cycles are not cancellable; let them finish
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self._http_client.aclose()
        self.persist_state()
        logging.info("Cloud sync stopped")

    def request_sync(self, reason: str) -> asyncio.Task:
        """Schedules a sync cycle without waiting for it."""

        task = asyncio.create_task(self.do_sync(reason))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def do_sync(self, reason: str = "manual") -> SyncResult:
        if self.state.sync_in_progress:
            logging.info("Sync already in progress, skipping %s trigger", reason)
            return SyncResult.skipped("locked", success=False)
        if not self.state.player_id:
            logging.info("No player id yet, skipping %s trigger", reason)
            return SyncResult.skipped("not_registered", success=False)

        self.state.sync_in_progress = True
        logging.info("Starting content sync (%s)", reason)
        try:
            result = await self.orchestrator.run(self.state.player_id)
        except Exception as exc:
            logging.error("Sync failed: %s", exc)
            result = SyncResult(success=False, reason="error", error=str(exc) or exc.__class__.__name__)
        finally:
            self.state.sync_in_progress = False

        if result.success:
            self.state.last_sync_time = iso_now()
        self.persist_state()
        logging.info("Sync result: %s", result.model_dump(exclude_none=True))

        if self.connection is not None and result.reason not in UNREPORTED_REASONS:
            await self.connection.report_sync_result(result)

        if result.content_changed and self._on_content_ready:
            try:
                self._on_content_ready()
            except Exception as exc:
                logging.error("Content-ready callback failed: %s", exc)
        return result

    def persist_state(self) -> None:
        save_sync_state(self.layout.state_file, self.state)

    def get_status(self) -> PlayerStatus:
        return build_status(self.state, self.offline, self.connection)

    def get_content_for_renderer(self) -> Optional[RendererContent]:
        return self.offline.get_renderer_content()

    def clean_stale(self, max_age_days: Optional[float] = None) -> int:
        if max_age_days is None:
            max_age_days = self.settings.stale_max_age_days
        return clean_stale_cache(self.layout.stale_dir, max_age_days)


def build_status(
    state: SyncState,
    offline: OfflineReader,
    connection: Optional[CloudConnection] = None,
) -> PlayerStatus:
    """Status record from persisted state, the cache on disk and the live connection if any."""

    capability = offline.check_offline_capability()
    connection_state = connection.connection_state if connection else ConnectionState.DISCONNECTED
    return PlayerStatus(
        is_online=state.is_online,
        is_connected=connection.connected if connection else False,
        connection_state=connection_state.value,
        player_id=state.player_id,
        last_sync_time=state.last_sync_time,
        sync_in_progress=state.sync_in_progress,
        cached_assets=capability.asset_count,
        can_play_offline=capability.can_operate,
    )
