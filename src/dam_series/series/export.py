"""CSV export of a series in the layout the market page downloads."""

from __future__ import annotations

import csv
import io
from pathlib import Path

from dam_series.core.models import SeriesResult

CSV_HEADER = ["#", "Time", "Volume (MWh)", "Price (€/MWh)"]

_BOM = "\ufeff"


def export_filename(result: SeriesResult) -> str:
    return f"dam_market_data_{result.date.isoformat()}.csv"


def series_to_csv(result: SeriesResult, bom: bool = True) -> str:
    """Render ``result`` as CSV text (CRLF line endings, optional UTF-8 BOM).

    Layout::

        Date: 2024-01-01

        #,Time,Volume (MWh),Price (€/MWh)
        1,00:00,120.00,85.10
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\r\n")
    writer.writerow([f"Date: {result.date.isoformat()}"])
    writer.writerow([])
    writer.writerow(CSV_HEADER)
    for i, (label, volume, price) in enumerate(result.points(), start=1):
        writer.writerow([i, label, f"{volume:.2f}", f"{price:.2f}"])

    text = buf.getvalue().rstrip("\r\n")
    return (_BOM + text) if bom else text


def write_csv(result: SeriesResult, output_dir: str | Path) -> Path:
    """Write the export file into ``output_dir`` and return its path."""
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(result)
    path.write_text(series_to_csv(result), encoding="utf-8", newline="")
    return path
