"""Cloud control channel, periodic triggers and the agent session."""

from .connection import CloudConnection, ConnectionState
from .scheduler import SyncScheduler
from .sync_client import PlayerSyncClient, build_status

__all__ = ["CloudConnection", "ConnectionState", "SyncScheduler", "PlayerSyncClient", "build_status"]
