"""Integration test fixtures: real files on disk, real extractors."""

from __future__ import annotations

import pytest

from dam_series.series.service import SeriesService


@pytest.fixture
def service(series_config) -> SeriesService:
    """A fully wired service over the temporary source directories."""
    return SeriesService.from_config(series_config)
