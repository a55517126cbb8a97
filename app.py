"""
HTTP surface for exercise-manifest.

Endpoints:
- GET /api/exercises - JSON manifest of available exercises
- GET /data.csv - raw CSV from the configured bulk data source
- everything else - static files from the public directory
"""

from collections.abc import Callable
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from cache import monotonic_ms
from config import Config
from errors import ManifestError
from fetcher import create_client
from logging_setup import get_logger
from manifest import ManifestBuilder

logger = get_logger()


def create_app(
    config: Config,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Callable[[], float] = monotonic_ms,
) -> FastAPI:
    """Create the FastAPI application.

    The upstream HTTP client and the manifest builder (with its caches) live
    for the lifetime of the app and are stored on app.state.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with create_client(transport) as client:
            app.state.builder = ManifestBuilder(config, client, clock=clock)
            yield

    app = FastAPI(title="exercise-manifest", lifespan=lifespan)

    @app.get("/api/exercises")
    async def list_exercises(request: Request):
        builder: ManifestBuilder = request.app.state.builder
        try:
            entries = await builder.build_manifest()
        except Exception:
            logger.exception("Failed to build exercises manifest")
            return JSONResponse(
                status_code=500, content={"error": "failed to list exercises"}
            )
        return [entry.to_dict() for entry in entries]

    @app.get("/data.csv")
    async def data_csv(request: Request):
        builder: ManifestBuilder = request.app.state.builder
        try:
            text = await builder.fetch_bulk_csv()
        except ManifestError as e:
            logger.error("Failed to fetch data source: %s", e)
            return JSONResponse(
                status_code=502, content={"error": "failed to fetch data source"}
            )
        return Response(content=text, media_type="text/csv")

    # Mounted last so the API routes above take precedence
    app.mount(
        "/",
        StaticFiles(directory=config.public_dir, html=True, check_dir=False),
        name="static",
    )

    return app
