"""Tests for the FastAPI REST API module."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from dam_series.api.app import create_app
from dam_series.api.deps import AppState
from dam_series.core.exceptions import NoUsableRows, ParseFailure
from dam_series.core.models import SourceMode
from dam_series.series.service import SeriesService


# -- Fixtures --


@pytest.fixture
def app(series_config):
    return create_app(config=series_config)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def stub_service(sample_series):
    service = MagicMock(spec=SeriesService)
    service.default_mode = SourceMode.AUTO
    service.get_series.return_value = sample_series
    return service


@pytest.fixture
def stub_client(series_config, stub_service):
    with TestClient(create_app(config=series_config, service=stub_service)) as c:
        yield c


# -- Lifespan --


class TestLifespan:
    def test_state_attached(self, app, series_config):
        with TestClient(app):
            state = app.state.app_state
            assert isinstance(state, AppState)
            assert state.config is series_config
            assert isinstance(state.service, SeriesService)


# -- Health --


class TestHealth:
    def test_health(self, client, series_config):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["default_source"] == "auto"
        assert body["xlsx_dir"] == series_config.sources.xlsx_dir
        assert body["xlsx_dir_exists"] is True
        assert body["json_dir_exists"] is True


# -- Series --


class TestSeriesEndpoint:
    def test_wire_format(self, stub_client, stub_service):
        resp = stub_client.get("/api/series", params={"date": "2024-01-01", "source": "JSON"})
        assert resp.status_code == 200
        assert resp.json() == {
            "date": "2024-01-01",
            "labels": ["00:00", "00:30", "01:00"],
            "PRICE": [80.5, 95.25, 0.0],
            "VOLUME": [100.0, 50.0, 0.0],
            "source": "json",
            "file": "20240101.json",
        }
        stub_service.get_series.assert_called_once_with(date(2024, 1, 1), SourceMode.JSON)

    def test_defaults(self, stub_client, stub_service):
        resp = stub_client.get("/api/series")
        assert resp.status_code == 200
        day, mode = stub_service.get_series.call_args.args
        assert isinstance(day, date)
        assert mode == SourceMode.AUTO

    @pytest.mark.parametrize("value", ["2024-13-01", "01-01-2024", "today"])
    def test_bad_date(self, stub_client, stub_service, value):
        resp = stub_client.get("/api/series", params={"date": value})
        assert resp.status_code == 400
        assert resp.json()["error"] == "InvalidRequest"
        stub_service.get_series.assert_not_called()

    def test_bad_source(self, stub_client):
        resp = stub_client.get("/api/series", params={"date": "2024-01-01", "source": "csv"})
        assert resp.status_code == 400
        assert "Unknown source mode" in resp.json()["detail"]

    def test_missing_file_is_404(self, client):
        resp = client.get("/api/series", params={"date": "2024-01-01", "source": "xlsx"})
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "FileNotFound"
        assert body["code"] == "no_file"

    def test_auto_missing_both_is_404(self, client):
        resp = client.get("/api/series", params={"date": "2024-01-01"})
        assert resp.status_code == 404
        assert "JSON" in resp.json()["detail"]

    @pytest.mark.parametrize(
        "error, code",
        [
            (ParseFailure("Invalid JSON", context={"file": "20240101.json"}), "parse_error"),
            (NoUsableRows("No usable rows", context={"file": "20240101.json"}), "no_rows"),
        ],
    )
    def test_data_errors_are_500(self, stub_client, stub_service, error, code):
        stub_service.get_series.side_effect = error
        resp = stub_client.get("/api/series", params={"date": "2024-01-01"})
        assert resp.status_code == 500
        body = resp.json()
        assert body["code"] == code
        assert body["file"] == "20240101.json"
