from __future__ import annotations

import os
import threading
from typing import Any, Protocol, runtime_checkable

import httpx

from ..codec.envelope import ConfigEnvelope
from ..codec.serializer import ConfigsSerializer
from ..core.errors import BackendError, MalformedEnvelope
from ..core.registry import ConfigRegistry, normalize_version

DEFAULT_BACKEND_URL = "http://127.0.0.1:8000"


@runtime_checkable
class ConfigBackendService(Protocol):
    """Remote holder of versioned config envelopes."""

    async def get_remote_version(self) -> int:
        """Return the latest version available remotely. Called every check, so it must be cheap."""
        ...

    async def fetch_remote_configuration(self, version: int) -> str:
        """Return the serialized envelope for ``version``."""
        ...


class InMemoryConfigBackend:
    """Backend that keeps published envelopes in memory, keyed by version."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._payloads: dict[int, str] = {}

    def publish(self, version: int, payload: str) -> int:
        v = normalize_version(version)
        with self._lock:
            self._payloads[v] = str(payload)
        return v

    def publish_registry(
        self,
        registry: ConfigRegistry,
        version: int,
        *,
        serializer: ConfigsSerializer | None = None,
    ) -> int:
        ser = serializer or ConfigsSerializer()
        return self.publish(version, ser.serialize(registry, version))

    def latest_version(self) -> int:
        with self._lock:
            return max(self._payloads, default=0)

    def versions(self) -> list[int]:
        with self._lock:
            return sorted(self._payloads)

    def payload(self, version: int) -> str | None:
        with self._lock:
            return self._payloads.get(int(version))

    async def get_remote_version(self) -> int:
        return self.latest_version()

    async def fetch_remote_configuration(self, version: int) -> str:
        payload = self.payload(version)
        if payload is None:
            raise BackendError(f"No configuration published for version {version}")
        return payload


def _normalize_base_url(url: str) -> str:
    url = url.strip()
    if not url:
        return ""
    # Allow passing just host:port.
    if "://" not in url:
        url = "http://" + url
    return url.rstrip("/")


def _env_timeout(default: float) -> float:
    raw = os.getenv("CONFIGS_HTTP_TIMEOUT_S", "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"CONFIGS_HTTP_TIMEOUT_S must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError("CONFIGS_HTTP_TIMEOUT_S must be positive")
    return value


class HttpConfigBackend:
    """HTTP client for a config backend server (see `configs_provider.runtime`).

    Contract:
    - GET /api/configs/version    -> {"version": "<n>"}
    - GET /api/configs/{version}  -> envelope JSON

    No retries: failures surface as `BackendError` and callers decide what to do.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if base_url is None:
            base_url = os.getenv("CONFIGS_BACKEND_URL", "") or DEFAULT_BACKEND_URL
        self.base_url = _normalize_base_url(base_url)
        if not self.base_url:
            raise ValueError("base_url cannot be empty")
        self.timeout_s = float(timeout_s) if timeout_s is not None else _env_timeout(10.0)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout_s, transport=self._transport)

    async def _get(self, path: str) -> httpx.Response:
        try:
            async with self._client() as client:
                res = await client.get(path)
        except httpx.HTTPError as e:
            raise BackendError(f"Request to {self.base_url}{path} failed: {e!r}") from e
        if res.status_code >= 400:
            raise BackendError(f"Request to {path} failed: {res.status_code} {res.text}")
        return res

    async def get_remote_version(self) -> int:
        res = await self._get("/api/configs/version")
        data: Any = res.json()
        raw = data.get("version") if isinstance(data, dict) else None
        try:
            return normalize_version(int(str(raw)))
        except (TypeError, ValueError):
            raise BackendError(f"Backend returned an invalid version: {data!r}") from None

    async def fetch_remote_configuration(self, version: int) -> str:
        v = normalize_version(version)
        res = await self._get(f"/api/configs/{v}")
        try:
            ConfigEnvelope.parse(res.text)
        except MalformedEnvelope as e:
            raise BackendError(f"Backend returned an invalid envelope for version {v}") from e
        return res.text
