"""JSON extractor: key-based rows, field names matched case-insensitively."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from dam_series.core.exceptions import NoUsableRows, ParseFailure
from dam_series.core.models import RawTuple, SourceKind
from dam_series.series.extractor import parse_number

logger = logging.getLogger(__name__)

_TIME_KEY = "time"
_PRICE_KEY = "price"
_VOLUME_KEY = "volume"


class JsonRowExtractor:
    """Reads a JSON export of the form ``[{...}, ...]`` or ``{"rows": [...]}``.

    Each row object exposes ``Time``, ``Price`` and ``Volume``; the keys are
    trimmed and compared case-insensitively, so ``"time"`` and ``" TIME "``
    are the same field. Entries that are not objects are skipped.
    """

    kind = SourceKind.JSON

    def load(self, path: Path) -> list[Any]:
        """Decode the file and unwrap the row list."""
        try:
            with open(path, encoding="utf-8-sig") as f:
                payload = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseFailure(
                f"Invalid JSON: {e}",
                context={"file": path.name, "reason": str(e)},
            ) from e
        except OSError as e:
            raise ParseFailure(
                f"Failed to read JSON file: {e}",
                context={"file": path.name, "reason": str(e)},
            ) from e

        rows = unwrap_rows(payload)
        if rows is None:
            raise ParseFailure(
                f"JSON payload must be a list of rows or an object with 'rows', "
                f"got {type(payload).__name__}",
                context={"file": path.name, "reason": "not_a_row_list"},
            )
        if not rows:
            raise NoUsableRows(
                "JSON contains no rows",
                context={"file": path.name, "reason": "empty"},
            )
        return rows

    def extract(self, source_rows: list[Any]) -> list[RawTuple]:
        tuples: list[RawTuple] = []
        for ordinal, row in enumerate(source_rows):
            if not isinstance(row, dict):
                continue

            fields = {str(k).strip().lower(): v for k, v in row.items()}
            volume = parse_number(fields.get(_VOLUME_KEY))
            if volume is None:
                continue

            tuples.append(
                RawTuple(
                    raw_time=fields.get(_TIME_KEY),
                    raw_category=None,
                    price=parse_number(fields.get(_PRICE_KEY)),
                    volume=volume,
                    ordinal=ordinal,
                )
            )

        logger.debug("Extracted %d of %d JSON rows", len(tuples), len(source_rows))
        return tuples


def unwrap_rows(payload: Any) -> list[Any] | None:
    """Return the row list of a payload, or None if it has no row list."""
    if isinstance(payload, dict):
        rows = payload.get("rows")
        return rows if isinstance(rows, list) else None
    if isinstance(payload, list):
        return payload
    return None
