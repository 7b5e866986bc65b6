"""Row extractor protocol and shared value parsing.

Architecture
------------
Each physical source format has one extractor that turns its rows into
``RawTuple`` records:

    file → RowExtractor.load() → source rows → RowExtractor.extract() → list[RawTuple]

The extractors know nothing about slots or prices per slot; snapping and
weighting happen downstream in the aggregator, so both sources share
exactly the same semantics once their rows are extracted.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from dam_series.core.models import RawTuple, SourceKind


@runtime_checkable
class RowExtractor(Protocol):
    """Turns one source format into RawTuple records.

    Attributes
    ----------
    kind : SourceKind
        The source format handled by this extractor.
    """

    kind: SourceKind

    def load(self, path: Path) -> Any:
        """Decode the file at ``path`` into source rows.

        Raises ParseFailure when the file cannot be decoded and
        NoUsableRows when it decodes to nothing.
        """
        ...

    def extract(self, source_rows: Any) -> list[RawTuple]:
        """Pull ``(time, category, price, volume, ordinal)`` tuples out of rows.

        Rows without a volume are dropped; their ordinal is still consumed.
        """
        ...


def parse_number(value: Any) -> float | None:
    """Tolerant numeric parse. Returns None for absent or non-numeric values.

    A comma is accepted as the decimal separator (``"12,5"`` -> 12.5).
    Empty strings, booleans, NaN and infinities are treated as absent,
    never as zero.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def is_blank(value: Any) -> bool:
    """True for None and whitespace-only strings."""
    return value is None or (isinstance(value, str) and not value.strip())
