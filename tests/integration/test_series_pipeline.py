"""Integration tests for the full series pipeline.

Tests the resolver, extractors, aggregator and cache working together over
real XLSX and JSON files, no mocks.
"""

from __future__ import annotations

from datetime import date

import pytest

from dam_series.core.config import SeriesConfig, SourcesConfig
from dam_series.core.exceptions import DirectoryMissing, FileNotFound, NoUsableRows, ParseFailure
from dam_series.core.models import SourceKind, SourceMode
from dam_series.series.service import SeriesService

pytestmark = pytest.mark.integration

DAY = date(2024, 1, 1)


class TestXlsxPipeline:
    def test_two_rows_in_one_slot(self, service, xlsx_dir, sample_xlsx_rows, make_xlsx):
        make_xlsx(xlsx_dir / "DAM_results_20240101.xlsx", sample_xlsx_rows)
        result = service.get_series(DAY, SourceMode.XLSX)
        assert result.labels == ("09:00",)
        assert result.volume == (15.0,)
        assert result.price == (53.33,)
        assert result.source == SourceKind.XLSX
        assert result.file == "DAM_results_20240101.xlsx"

    def test_full_day_by_ordinal(self, service, xlsx_dir, xlsx_header, make_xlsx):
        rows = xlsx_header + [[None, "ALL", 40 + i, "EUR", 1.0] for i in range(48)]
        make_xlsx(xlsx_dir / "2024-01-01.xlsx", rows)
        result = service.get_series(DAY, SourceMode.XLSX)
        assert len(result.labels) == 48
        assert result.labels[0] == "00:00"
        assert result.labels[-1] == "23:30"
        assert result.price[-1] == 87.0

    def test_no_all_rows(self, service, xlsx_dir, xlsx_header, make_xlsx):
        make_xlsx(xlsx_dir / "20240101.xlsx", xlsx_header + [["10:00", "OTHER", 1, "EUR", 1]])
        with pytest.raises(NoUsableRows) as exc_info:
            service.get_series(DAY, SourceMode.XLSX)
        assert exc_info.value.context["file"] == "20240101.xlsx"


class TestJsonPipeline:
    def test_bare_list(self, service, json_dir, sample_json_rows, make_json):
        make_json(json_dir / "20240101.json", sample_json_rows)
        result = service.get_series(DAY, SourceMode.JSON)
        assert result.labels == ("00:00", "00:30", "01:00")
        assert result.price == (80.5, 82.0, 0.0)
        assert result.volume == (100.0, 50.0, 0.0)

    def test_rows_envelope(self, service, json_dir, make_json):
        make_json(
            json_dir / "20240101.json",
            {"rows": [{"time": "2024-01-01 13:10", "price": 70, "volume": 3}]},
        )
        result = service.get_series(DAY, SourceMode.JSON)
        assert result.labels == ("13:00",)
        assert result.price == (70.0,)

    def test_invalid_json(self, service, json_dir):
        (json_dir / "20240101.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ParseFailure, match="Invalid JSON"):
            service.get_series(DAY, SourceMode.JSON)

    def test_all_volumes_absent(self, service, json_dir, make_json):
        make_json(json_dir / "20240101.json", [{"time": "00:00", "price": 1}])
        with pytest.raises(NoUsableRows):
            service.get_series(DAY, SourceMode.JSON)


class TestAutoMode:
    def test_xlsx_preferred(self, service, xlsx_dir, json_dir, sample_xlsx_rows, sample_json_rows,
                            make_xlsx, make_json):
        make_xlsx(xlsx_dir / "20240101.xlsx", sample_xlsx_rows)
        make_json(json_dir / "20240101.json", sample_json_rows)
        assert service.get_series(DAY).source == SourceKind.XLSX

    def test_falls_back_when_xlsx_missing(self, service, json_dir, sample_json_rows, make_json):
        make_json(json_dir / "20240101.json", sample_json_rows)
        result = service.get_series(DAY)
        assert result.source == SourceKind.JSON
        assert result.file == "20240101.json"

    def test_falls_back_when_xlsx_dir_missing(self, tmp_path, json_dir, sample_json_rows, make_json):
        make_json(json_dir / "20240101.json", sample_json_rows)
        config = SeriesConfig(
            sources=SourcesConfig(xlsx_dir=str(tmp_path / "absent"), json_dir=str(json_dir))
        )
        assert SeriesService.from_config(config).get_series(DAY).source == SourceKind.JSON

    def test_corrupt_xlsx_is_terminal(self, service, xlsx_dir, json_dir, sample_json_rows, make_json):
        (xlsx_dir / "20240101.xlsx").write_bytes(b"not a zip archive")
        make_json(json_dir / "20240101.json", sample_json_rows)
        with pytest.raises(ParseFailure) as exc_info:
            service.get_series(DAY)
        assert exc_info.value.context["source"] == "xlsx"

    def test_both_missing_reports_json(self, service):
        with pytest.raises(FileNotFound) as exc_info:
            service.get_series(DAY)
        assert exc_info.value.context["source"] == "json"

    def test_json_dir_missing(self, tmp_path):
        config = SeriesConfig(
            sources=SourcesConfig(xlsx_dir=str(tmp_path / "a"), json_dir=str(tmp_path / "b"))
        )
        with pytest.raises(DirectoryMissing, match="JSON directory not found"):
            SeriesService.from_config(config).get_series(DAY)


class TestCachedPipeline:
    def test_second_call_served_from_cache(self, service, json_dir, sample_json_rows, make_json):
        path = make_json(json_dir / "20240101.json", sample_json_rows)
        first = service.get_series(DAY, SourceMode.JSON)
        path.unlink()
        assert service.get_series(DAY, SourceMode.JSON) is first
        with pytest.raises(FileNotFound):
            service.get_series(DAY, SourceMode.AUTO)
