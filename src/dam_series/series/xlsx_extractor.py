"""Spreadsheet extractor: positional columns after a fixed header block."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Any, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from dam_series.core.config import XlsxLayoutConfig
from dam_series.core.exceptions import NoUsableRows, ParseFailure
from dam_series.core.models import RawTuple, SourceKind
from dam_series.series.extractor import is_blank, parse_number

logger = logging.getLogger(__name__)

# SyntaxError covers both xml.etree and lxml parse errors
_WORKBOOK_ERRORS = (
    InvalidFileException,
    zipfile.BadZipFile,
    KeyError,
    ValueError,
    OSError,
    SyntaxError,
)


class XlsxRowExtractor:
    """Reads the first worksheet of a DAM spreadsheet export.

    Layout (defaults, all configurable through ``XlsxLayoutConfig``):

    - rows 1–3 are headers; data starts at the 4th physical row
    - column A holds the time, B the category, C the price, E the volume
    - only rows whose category is ``ALL`` (any case, surrounding
      whitespace ignored) are kept

    Parameters
    ----------
    layout : XlsxLayoutConfig | None
        Column and header positions. Defaults to the standard export layout.
    """

    kind = SourceKind.XLSX

    def __init__(self, layout: XlsxLayoutConfig | None = None) -> None:
        self._layout = layout or XlsxLayoutConfig()

    def load(self, path: Path) -> list[tuple[Any, ...]]:
        """Read all physical rows of the first worksheet as value tuples.

        Read-only workbooks parse sheet XML lazily, so a damaged sheet
        surfaces while iterating rows rather than on open.
        """
        try:
            workbook = load_workbook(path, read_only=True, data_only=True)
            try:
                if not workbook.worksheets:
                    raise NoUsableRows(
                        "No worksheets in XLSX",
                        context={"file": path.name, "reason": "empty"},
                    )
                sheet = workbook.worksheets[0]
                rows = [tuple(row) for row in sheet.iter_rows(values_only=True)]
            finally:
                workbook.close()
        except _WORKBOOK_ERRORS as e:
            raise ParseFailure(
                f"Failed to parse XLSX: {e}",
                context={"file": path.name, "reason": str(e)},
            ) from e

        if not rows:
            raise NoUsableRows(
                "No rows in XLSX",
                context={"file": path.name, "reason": "empty"},
            )
        if len(rows) <= self._layout.header_rows:
            raise NoUsableRows(
                f"No rows in XLSX after header row {self._layout.header_rows}",
                context={"file": path.name, "reason": "no_rows_after_header"},
            )
        return rows

    def extract(self, source_rows: Sequence[Sequence[Any]]) -> list[RawTuple]:
        """Keep the ``ALL`` rows that carry a volume.

        Raises NoUsableRows when no row past the header matches the category.
        """
        layout = self._layout
        tuples: list[RawTuple] = []
        category_rows = 0

        data_rows = source_rows[layout.header_rows :]
        for ordinal, row in enumerate(data_rows):
            if not row or all(is_blank(cell) for cell in row):
                continue

            category = _cell(row, layout.category_col)
            if category is None or str(category).strip().casefold() != layout.category.casefold():
                continue
            category_rows += 1

            volume = parse_number(_cell(row, layout.volume_col))
            if volume is None:
                continue

            tuples.append(
                RawTuple(
                    raw_time=_cell(row, layout.time_col),
                    raw_category=str(category).strip(),
                    price=parse_number(_cell(row, layout.price_col)),
                    volume=volume,
                    ordinal=ordinal,
                )
            )

        if category_rows == 0:
            raise NoUsableRows(
                f"No {layout.category} category rows found after row {layout.header_rows + 1}",
                context={"reason": "no_category_rows"},
            )

        logger.debug(
            "Extracted %d of %d XLSX data rows (%d %s rows)",
            len(tuples),
            len(data_rows),
            category_rows,
            layout.category,
        )
        return tuples


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if index < len(row) else None
