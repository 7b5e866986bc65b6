"""FastAPI route definitions for the DAM series API."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Query

import dam_series
from dam_series.api.deps import get_config, get_service
from dam_series.api.schemas import ErrorResponse, HealthResponse, SeriesResponse
from dam_series.core.config import SeriesConfig
from dam_series.series.request import SeriesRequest
from dam_series.series.service import SeriesService

router = APIRouter()


# -- Health --


@router.get("/health", response_model=HealthResponse)
def health_check(config: SeriesConfig = Depends(get_config)):
    """Configured source directories and whether they exist."""
    sources = config.sources
    return HealthResponse(
        status="ok",
        version=dam_series.__version__,
        default_source=sources.default_source.value,
        xlsx_dir=sources.xlsx_dir,
        json_dir=sources.json_dir,
        xlsx_dir_exists=Path(sources.xlsx_dir).is_dir(),
        json_dir_exists=Path(sources.json_dir).is_dir(),
    )


# -- Series --


@router.get(
    "/series",
    response_model=SeriesResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def get_series(
    date: str | None = Query(None, description="Trading day, YYYY-MM-DD (default: today, UTC)"),
    source: str | None = Query(None, description="auto | xlsx | json (case-insensitive)"),
    service: SeriesService = Depends(get_service),
):
    """Half-hour price (VWAP) and volume series for one trading day.

    Sync handler: the engine does blocking file I/O, so FastAPI runs it in
    its threadpool.
    """
    request = SeriesRequest.parse(date, source, default_source=service.default_mode)
    result = service.get_series(request.date, request.mode)
    return result.to_payload()
