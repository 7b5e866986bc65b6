"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dam_series.api.deps import AppState
from dam_series.api.routes import router
from dam_series.core.config import SeriesConfig, load_config
from dam_series.core.exceptions import ConfigError, DamSeriesError, InvalidRequest, SeriesError
from dam_series.series.service import SeriesService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    config = app.state._pending_config or load_config()
    service = app.state._pending_service or SeriesService.from_config(config)

    app.state.app_state = AppState(config=config, service=service)

    yield


def create_app(
    config: SeriesConfig | None = None,
    service: SeriesService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    import dam_series

    app = FastAPI(
        title="DAM Series API",
        description="Half-hour day-ahead market price and volume series",
        version=dam_series.__version__,
        lifespan=lifespan,
    )

    # Stash config so lifespan can retrieve it
    app.state._pending_config = config
    app.state._pending_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    # Exception handlers
    @app.exception_handler(SeriesError)
    async def series_exception_handler(request: Request, exc: SeriesError):
        if exc.status_hint >= 500:
            logger.error("Series request failed: %s %s", exc.code, exc, extra={"context": exc.context})
        return JSONResponse(status_code=exc.status_hint, content=exc.to_payload())

    @app.exception_handler(DamSeriesError)
    async def dam_series_exception_handler(request: Request, exc: DamSeriesError):
        status_map = {
            InvalidRequest: 400,
            ConfigError: 500,
        }
        status = status_map.get(type(exc), 500)
        return JSONResponse(
            status_code=status,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    return app
