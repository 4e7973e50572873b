from __future__ import annotations

import contextlib
import socket
import threading
import time
from dataclasses import dataclass
from pathlib import Path

import uvicorn

from ..codec.envelope import ConfigEnvelope
from ..codec.serializer import parse_version_label
from ..sdk.backend import HttpConfigBackend, InMemoryConfigBackend
from .api import create_app


@dataclass(frozen=True)
class BackendServer:
    host: str
    port: int
    url: str
    backend: InMemoryConfigBackend

    def client(self, *, timeout_s: float = 10.0) -> HttpConfigBackend:
        return HttpConfigBackend(self.url, timeout_s=timeout_s)


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def load_envelope_file(backend: InMemoryConfigBackend, path: str | Path) -> int:
    """Publish an envelope file under the version it declares (0 when the label is unparsable)."""

    text = Path(path).read_text(encoding="utf-8")
    version = parse_version_label(ConfigEnvelope.parse(text).version)
    return backend.publish(version, text)


def run(
    *,
    host: str = "127.0.0.1",
    port: int = 0,
    envelope_path: str | Path | None = None,
    backend: InMemoryConfigBackend | None = None,
    log_level: str = "info",
    access_log: bool = False,
    startup_timeout_s: float = 5.0,
) -> BackendServer:
    """Start a config backend server in a background thread.

    Notes:
    - `port=0` means "pick a free port".
    - If `envelope_path` is given, that envelope is published before serving.
    """

    store = backend if backend is not None else InMemoryConfigBackend()
    if envelope_path is not None:
        load_envelope_file(store, envelope_path)

    if port == 0:
        port = _find_free_port(host)

    app = create_app(store)
    config = uvicorn.Config(app, host=host, port=port, log_level=log_level, access_log=access_log)
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    # Wait for the socket to be bound so an immediate client request does not race startup.
    deadline = time.monotonic() + startup_timeout_s
    while not server.started and thread.is_alive() and time.monotonic() < deadline:
        time.sleep(0.01)
    if not server.started:
        raise RuntimeError(f"Config backend server failed to start on {host}:{port}")

    return BackendServer(host=host, port=port, url=f"http://{host}:{port}", backend=store)
