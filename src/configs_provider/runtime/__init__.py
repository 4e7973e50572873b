from __future__ import annotations

from .api import create_app
from .server import BackendServer, load_envelope_file, run

__all__ = ["create_app", "BackendServer", "load_envelope_file", "run"]
