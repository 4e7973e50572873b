from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from configs_provider.codec import ConfigsSerializer, ExclusionSet
from configs_provider.core import ConfigRegistry, MalformedEnvelope
from configs_provider.runtime import create_app, load_envelope_file
from configs_provider.sdk import InMemoryConfigBackend


def _skip(msg: str) -> None:  # pragma: no cover
    try:
        import pytest  # type: ignore

        pytest.skip(msg)
    except Exception:
        raise RuntimeError(msg)


@dataclass(frozen=True)
class MatchmakingConfig:
    min_rating: int
    max_wait_s: float


def _envelope(version: int) -> str:
    reg = ConfigRegistry()
    reg.add_singleton(MatchmakingConfig(1000, 30.0))
    return ConfigsSerializer(ExclusionSet()).serialize(reg, version)


def _client(backend: InMemoryConfigBackend | None = None):
    try:
        from fastapi.testclient import TestClient
    except Exception as e:  # pragma: no cover
        _skip(f"TestClient not available ({e!r}); install test extras to run this test")
        return None
    return TestClient(create_app(backend))


def test_healthz_and_empty_version() -> None:
    client = _client()
    assert client.get("/healthz").json() == {"ok": True}
    assert client.get("/api/configs/version").json() == {"version": "0"}
    assert client.get("/api/configs/1").status_code == 404


def test_publish_then_fetch() -> None:
    backend = InMemoryConfigBackend()
    client = _client(backend)

    put = client.put("/api/configs/12", content=_envelope(12), headers={"content-type": "application/json"})
    assert put.status_code == 200
    assert put.json() == {"version": "12"}

    assert client.get("/api/configs/version").json() == {"version": "12"}
    assert client.get("/api/configs").json() == {"versions": ["12"]}

    res = client.get("/api/configs/12")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("application/json")
    assert json.loads(res.text) == json.loads(_envelope(12))
    assert backend.payload(12) == _envelope(12)


def test_publish_rejects_non_envelopes() -> None:
    client = _client()
    assert client.put("/api/configs/1", content=b"nope").status_code == 422
    assert client.put("/api/configs/1", content=b"[1, 2]").status_code == 422
    assert client.put("/api/configs/1", content=b'{"version": "1", "tables": [1]}').status_code == 422
    assert client.put("/api/configs/1", content=b'{"version": "1", "tables": {"a:B": [1]}}').status_code == 422
    assert client.put(f"/api/configs/{2**64}", content=_envelope(1)).status_code == 422
    assert client.get("/api/configs/version").json() == {"version": "0"}


def test_load_envelope_file_publishes_declared_version(tmp_path: Path) -> None:
    path = tmp_path / "configs.json"
    path.write_text(_envelope(21), encoding="utf-8")

    backend = InMemoryConfigBackend()
    assert load_envelope_file(backend, path) == 21
    assert backend.latest_version() == 21


def test_load_envelope_file_rejects_non_envelopes(tmp_path: Path) -> None:
    import pytest

    path = tmp_path / "configs.json"
    path.write_text('{"version": "3", "tables": "none"}', encoding="utf-8")

    backend = InMemoryConfigBackend()
    with pytest.raises(MalformedEnvelope):
        load_envelope_file(backend, path)
    assert backend.versions() == []
