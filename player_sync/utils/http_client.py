"""Shared HTTP helpers for the player config API and asset downloads."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
import requests

DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_DOWNLOAD_TIMEOUT = 300
CHUNK_SIZE = 1 << 16


class AuthenticationError(Exception):
    """Raised when the server rejects the device token."""


class HttpStatusError(Exception):
    """Raised for any response other than HTTP 200."""

    def __init__(self, status: int, url: str) -> None:
        super().__init__(f"HTTP {status} from {url}")
        self.status = status
        self.url = url


class HttpClient:
    """Fetches server JSON with requests and streams asset bodies with aiohttp."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        download_timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.download_timeout = download_timeout
        self._headers: Dict[str, str] = {"Authorization": f"Bearer {token}"}

        self._api_session = requests.Session()
        self._api_session.headers.update(self._headers)
        self._api_session.headers["Content-Type"] = "application/json"

        self._async_session: Optional[aiohttp.ClientSession] = None
        self._async_lock: Optional[asyncio.Lock] = None
        self._async_loop: Optional[asyncio.AbstractEventLoop] = None

    def resolve_url(self, url: str) -> str:
        """Returns ``url`` unchanged if absolute, otherwise joined onto the server base."""

        if url.startswith(("http://", "https://")):
            return url
        return f"{self.base_url}/{url.lstrip('/')}"

    def request_json(self, path: str) -> Dict[str, Any]:
        """GET a server API path and return the decoded JSON object."""

        url = self.resolve_url(path)
        try:
            response = self._api_session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            logging.error("HTTP GET to %s failed: %s", url, exc)
            raise

        if response.status_code in {401, 403}:
            logging.error("Authentication failed (status %s) for %s", response.status_code, url)
            raise AuthenticationError(f"Device token rejected by {url}")
        if response.status_code != 200:
            raise HttpStatusError(response.status_code, url)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ValueError(f"Invalid JSON from {url}") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected JSON payload from {url}")
        return payload

    async def download_stream(self, url: str, dest_path: str, timeout: Optional[float] = None) -> int:
        """Stream ``url`` into ``dest_path``; returns the number of bytes written."""

        session = await self._get_async_session()
        request_timeout = aiohttp.ClientTimeout(total=timeout or self.download_timeout)
        async with session.get(self.resolve_url(url), timeout=request_timeout) as resp:
            if resp.status in {401, 403}:
                raise AuthenticationError(f"Device token rejected by {url}")
            if resp.status != 200:
                raise HttpStatusError(resp.status, url)
            written = 0
            with open(dest_path, "wb") as file_obj:
                async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                    if chunk:
                        file_obj.write(chunk)
                        written += len(chunk)
        return written

    async def _get_async_session(self) -> aiohttp.ClientSession:
        current_loop = asyncio.get_running_loop()
        if self._async_session:
            if (
                self._async_session.closed
                or not self._async_loop
                or self._async_loop.is_closed()
                or self._async_loop is not current_loop
            ):
                await self._shutdown_async_session()

        if self._async_lock is None or self._async_loop is not current_loop:
            self._async_lock = asyncio.Lock()

        async with self._async_lock:
            if self._async_session and not self._async_session.closed:
                return self._async_session
            self._async_session = aiohttp.ClientSession(headers=self._headers.copy())
            self._async_loop = current_loop
        return self._async_session

    async def _shutdown_async_session(self) -> None:
        if self._async_session and not self._async_session.closed:
            await self._async_session.close()
        self._async_session = None
        self._async_loop = None

    def close(self) -> None:
        self._api_session.close()

    async def aclose(self) -> None:
        self.close()
        await self._shutdown_async_session()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.aclose()
