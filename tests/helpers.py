import asyncio
import hashlib
from typing import Any, Dict, List, Optional, Tuple

from player_sync.utils.http_client import HttpStatusError


def sha256_of(data: bytes) -> str:
    return "sha256:" + hashlib.sha256(data).hexdigest()


def make_asset(asset_id: str, data: bytes, filename: Optional[str] = None, checksum: Any = True, **extra: Any) -> Dict[str, Any]:
    asset = {
        "id": asset_id,
        "filename": filename or f"{asset_id}.mp4",
        "type": "video",
        "url": f"/media/{asset_id}",
    }
    if checksum is True:
        asset["checksum"] = sha256_of(data)
    elif checksum:
        asset["checksum"] = checksum
    asset.update(extra)
    return asset


def make_config(config_hash: str, assets: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "config_hash": config_hash,
        "playlist": {"id": "pl-1", "name": "Lobby", "assets": assets, "total_duration": 30},
    }


class FakeHttpClient:
    """In-memory stand-in for ``HttpClient``.

    ``routes`` maps API paths to payloads (or exceptions to raise); ``bodies``
    maps asset URLs to bytes, an exception, or an ``int`` HTTP status.
    """

    def __init__(self) -> None:
        self.routes: Dict[str, Any] = {}
        self.bodies: Dict[str, Any] = {}
        self.requests: List[str] = []
        self.downloads: List[str] = []
        self.gate: Optional[asyncio.Event] = None
        self.closed = False

    def serve_config(self, player_id: str, config: Dict[str, Any], bodies: Dict[str, bytes]) -> None:
        self.routes[f"api/players/{player_id}/config/hash"] = {"config_hash": config["config_hash"]}
        self.routes[f"api/players/{player_id}/config"] = config
        for asset in config["playlist"]["assets"]:
            if asset["id"] in bodies:
                self.bodies[asset["url"]] = bodies[asset["id"]]

    def resolve_url(self, url: str) -> str:
        return url

    def request_json(self, path: str) -> Dict[str, Any]:
        self.requests.append(path)
        if path not in self.routes:
            raise HttpStatusError(404, path)
        payload = self.routes[path]
        if isinstance(payload, Exception):
            raise payload
        return payload

    async def download_stream(self, url: str, dest_path: str, timeout: Optional[float] = None) -> int:
        self.downloads.append(url)
        if self.gate is not None:
            await self.gate.wait()
        body = self.bodies.get(url, 404)
        if isinstance(body, Exception):
            raise body
        if isinstance(body, int):
            raise HttpStatusError(body, url)
        with open(dest_path, "wb") as handle:
            handle.write(body)
        return len(body)

    def close(self) -> None:
        self.closed = True

    async def aclose(self) -> None:
        self.closed = True


class FakeSio:
    """Records handlers and emits in place of ``socketio.AsyncClient``."""

    def __init__(self) -> None:
        self.handlers: Dict[str, Any] = {}
        self.emitted: List[Tuple[str, Any]] = []
        self.connected = False
        self.shutdown_called = False
        self._closed: Optional[asyncio.Event] = None

    def on(self, event: str, handler: Any = None) -> None:
        self.handlers[event] = handler

    async def emit(self, event: str, data: Any = None) -> None:
        self.emitted.append((event, data))

    async def connect(self, url: str, transports: Any = None, retry: bool = False) -> None:
        self._closed = asyncio.Event()
        self.connected = True
        await self.handlers["connect"]()

    async def wait(self) -> None:
        await self._closed.wait()

    async def shutdown(self) -> None:
        self.shutdown_called = True
        self.connected = False
        if self._closed is not None:
            self._closed.set()

    async def trigger(self, event: str, *args: Any) -> None:
        await self.handlers[event](*args)

    def events(self, name: str) -> List[Any]:
        return [data for event, data in self.emitted if event == name]
