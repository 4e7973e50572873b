from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from starlette.responses import Response

from ..codec.envelope import ConfigEnvelope
from ..core.errors import MalformedEnvelope
from ..sdk.backend import InMemoryConfigBackend


def _check_envelope_shape(payload: bytes) -> None:
    try:
        ConfigEnvelope.parse(payload)
    except MalformedEnvelope as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def create_app(backend: InMemoryConfigBackend | None = None) -> FastAPI:
    """Create the config backend app serving ``backend`` (a fresh in-memory one by default)."""

    store = backend if backend is not None else InMemoryConfigBackend()

    app = FastAPI(title="configs_provider", version="0.1.0")
    app.state.backend = store

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/configs/version")
    def get_version() -> dict[str, str]:
        return {"version": str(store.latest_version())}

    @app.get("/api/configs")
    def list_versions() -> dict[str, list[str]]:
        return {"versions": [str(v) for v in store.versions()]}

    @app.get("/api/configs/{version}")
    def get_configs(version: int) -> Response:
        payload = store.payload(version)
        if payload is None:
            raise HTTPException(status_code=404, detail=f"No configuration for version {version}")
        return Response(content=payload, media_type="application/json")

    @app.put("/api/configs/{version}")
    async def put_configs(version: int, request: Request) -> dict[str, str]:
        body = await request.body()
        _check_envelope_shape(body)
        try:
            v = store.publish(version, body.decode("utf-8"))
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        return {"version": str(v)}

    return app
