"""Series normalization and source-resolution engine.

Architecture
------------
Two interchangeable exports feed one canonical half-hour series:

    date, mode → SourceResolver → RowExtractor → list[RawTuple]
               → SlotAggregator → SeriesResult → SeriesCache → Consumer

Key abstractions:

- ``SeriesResult``: the canonical series (labels, PRICE, VOLUME).
- ``RowExtractor``: turns one source format into ``RawTuple`` records.
- ``SlotAggregator``: snaps rows to half-hour slots and computes VWAP.
- ``SourceResolver``: finds the file for a date.
- ``SeriesCache``: short-lived memo of successes.
- ``SeriesService``: the façade, including the ``auto`` fallback policy.

Built-in implementations:

- ``XlsxRowExtractor``: positional spreadsheet rows, category ``ALL`` only.
- ``JsonRowExtractor``: key-based JSON rows, case-insensitive field names.
- ``TTLSeriesCache`` / ``NullSeriesCache``.

Adding a new source format:
1. Write an extractor implementing ``load(path)`` and ``extract(rows)``.
2. Teach ``SourceResolver`` where its files live.
3. Register it with ``SeriesService``; consumers need no changes.
"""

from dam_series.series.aggregator import SlotAggregator
from dam_series.series.cache import NullSeriesCache, SeriesCache, TTLSeriesCache
from dam_series.series.export import export_filename, series_to_csv, write_csv
from dam_series.series.extractor import RowExtractor, parse_number
from dam_series.series.json_extractor import JsonRowExtractor
from dam_series.series.labels import HALF_HOUR_LABELS, normalize_label, snap
from dam_series.series.request import SeriesRequest
from dam_series.series.resolver import SourceResolver
from dam_series.series.service import SeriesService
from dam_series.series.xlsx_extractor import XlsxRowExtractor

__all__ = [
    # Labels
    "HALF_HOUR_LABELS",
    "normalize_label",
    "snap",
    # Extraction
    "RowExtractor",
    "XlsxRowExtractor",
    "JsonRowExtractor",
    "parse_number",
    # Aggregation
    "SlotAggregator",
    # Resolution
    "SourceResolver",
    # Cache
    "SeriesCache",
    "TTLSeriesCache",
    "NullSeriesCache",
    # Service
    "SeriesRequest",
    "SeriesService",
    # Export
    "export_filename",
    "series_to_csv",
    "write_csv",
]
