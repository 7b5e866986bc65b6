"""API-specific response schemas (Pydantic v2)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


# -- Error --


class ErrorResponse(BaseModel):
    """Standard error envelope."""

    error: str
    code: str | None = None
    detail: str | None = None
    file: str | None = None


# -- Series --


class SeriesResponse(BaseModel):
    """The canonical series in wire format."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    labels: list[str]
    price: list[float] = Field(alias="PRICE")
    volume: list[float] = Field(alias="VOLUME")
    source: str
    file: str


# -- Health --


class HealthResponse(BaseModel):
    status: str
    version: str
    default_source: str
    xlsx_dir: str
    json_dir: str
    xlsx_dir_exists: bool
    json_dir_exists: bool
