"""Dependency injection for FastAPI routes."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from dam_series.core.config import SeriesConfig
from dam_series.series.service import SeriesService


@dataclass
class AppState:
    """Shared application state, attached to app.state during lifespan."""

    config: SeriesConfig
    service: SeriesService


def get_app_state(request: Request) -> AppState:
    """Dependency: retrieve AppState from the request."""
    return request.app.state.app_state


def get_config(request: Request) -> SeriesConfig:
    """Dependency: retrieve config."""
    return request.app.state.app_state.config


def get_service(request: Request) -> SeriesService:
    """Dependency: retrieve the series service."""
    return request.app.state.app_state.service
