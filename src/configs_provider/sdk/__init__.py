from __future__ import annotations

from .backend import DEFAULT_BACKEND_URL, ConfigBackendService, HttpConfigBackend, InMemoryConfigBackend
from .sync import ConfigSynchronizer

__all__ = [
    "DEFAULT_BACKEND_URL",
    "ConfigBackendService",
    "InMemoryConfigBackend",
    "HttpConfigBackend",
    "ConfigSynchronizer",
]
