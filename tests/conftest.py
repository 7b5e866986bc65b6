"""Shared pytest fixtures for dam-series."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook

from dam_series.core.config import CacheConfig, SeriesConfig, SourcesConfig
from dam_series.core.models import SeriesResult, SourceKind

HEADER_ROWS = [
    ["DAM results"],
    ["Delivery day", "2024-01-01"],
    ["Time", "Category", "Price", "Currency", "Volume"],
]


def write_xlsx(path: Path, rows: list[list[Any]]) -> Path:
    """Write ``rows`` to the first worksheet of a new workbook."""
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


def write_json(path: Path, payload: Any) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture
def xlsx_dir(tmp_path: Path) -> Path:
    d = tmp_path / "power-xlsx"
    d.mkdir()
    return d


@pytest.fixture
def json_dir(tmp_path: Path) -> Path:
    d = tmp_path / "power-json"
    d.mkdir()
    return d


@pytest.fixture
def series_config(xlsx_dir: Path, json_dir: Path) -> SeriesConfig:
    return SeriesConfig(
        sources=SourcesConfig(xlsx_dir=str(xlsx_dir), json_dir=str(json_dir)),
        cache=CacheConfig(ttl_seconds=60),
    )


@pytest.fixture
def trading_day() -> date:
    return date(2024, 1, 1)


@pytest.fixture
def xlsx_header() -> list[list[Any]]:
    """The three header rows every spreadsheet export starts with."""
    return [list(row) for row in HEADER_ROWS]


@pytest.fixture
def sample_xlsx_rows() -> list[list[Any]]:
    """Header block plus two ALL rows snapping to 09:00 and one OTHER row."""
    return HEADER_ROWS + [
        ["09:05", "ALL", 50.0, "EUR", 10.0],
        ["09:12", "ALL", 60.0, "EUR", 5.0],
        ["09:30", "OTHER", 999, "EUR", 999],
    ]


@pytest.fixture
def sample_json_rows() -> list[dict[str, Any]]:
    return [
        {"Time": "00:00", "Price": "80,5", "Volume": "100"},
        {"time": "00:30", "price": 82.0, "volume": 50},
        {" TIME ": "01:00", "PRICE": 90, "VOLUME": 0},
    ]


@pytest.fixture
def sample_series() -> SeriesResult:
    return SeriesResult(
        date=date(2024, 1, 1),
        labels=["00:00", "00:30", "01:00"],
        price=[80.5, 95.25, 0.0],
        volume=[100.0, 50.0, 0.0],
        source=SourceKind.JSON,
        file="20240101.json",
    )


@pytest.fixture
def make_xlsx():
    """Factory fixture: ``make_xlsx(path, rows)`` writes a workbook."""
    return write_xlsx


@pytest.fixture
def make_json():
    """Factory fixture: ``make_json(path, payload)`` writes a JSON file."""
    return write_json
