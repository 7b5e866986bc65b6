"""Series service: the facade that turns (date, mode) into a series.

Pipeline per source kind::

    SourceResolver.resolve → RowExtractor.load → RowExtractor.extract
        → SlotAggregator.aggregate

``auto`` mode runs the XLSX pipeline and moves on to JSON only when the
spreadsheet is structurally absent (no directory, no matching file). A
spreadsheet that exists but is malformed or empty is reported as is:
substituting a different dataset would hide a real data problem.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime

from dam_series.core.config import SeriesConfig
from dam_series.core.exceptions import SeriesError
from dam_series.core.models import SeriesResult, SourceKind, SourceMode
from dam_series.series.aggregator import SlotAggregator
from dam_series.series.cache import NullSeriesCache, SeriesCache, TTLSeriesCache
from dam_series.series.extractor import RowExtractor
from dam_series.series.json_extractor import JsonRowExtractor
from dam_series.series.request import parse_date
from dam_series.series.resolver import SourceResolver
from dam_series.series.xlsx_extractor import XlsxRowExtractor

logger = logging.getLogger(__name__)

_AUTO_ORDER = (SourceKind.XLSX, SourceKind.JSON)


class SeriesService:
    """Resolves, extracts, aggregates and caches daily series.

    Parameters
    ----------
    resolver : SourceResolver
        Finds the file for a date and source kind.
    extractors : Mapping[SourceKind, RowExtractor] | None
        One extractor per source kind. Defaults to the standard XLSX and
        JSON extractors.
    aggregator : SlotAggregator | None
        Defaults to a 2-decimal aggregator.
    cache : SeriesCache | None
        Defaults to a fresh TTLSeriesCache. Pass NullSeriesCache to disable.
    cache_ttl : float
        Seconds a success stays cached.
    default_mode : SourceMode
        Mode used when a caller passes none.
    """

    def __init__(
        self,
        resolver: SourceResolver,
        extractors: Mapping[SourceKind, RowExtractor] | None = None,
        aggregator: SlotAggregator | None = None,
        cache: SeriesCache | None = None,
        cache_ttl: float = 60.0,
        default_mode: SourceMode = SourceMode.AUTO,
    ) -> None:
        self._resolver = resolver
        self._extractors: dict[SourceKind, RowExtractor] = dict(
            extractors
            or {
                SourceKind.XLSX: XlsxRowExtractor(),
                SourceKind.JSON: JsonRowExtractor(),
            }
        )
        self._aggregator = aggregator or SlotAggregator()
        self._cache: SeriesCache = cache if cache is not None else TTLSeriesCache()
        self._cache_ttl = cache_ttl
        self.default_mode = default_mode

    @classmethod
    def from_config(
        cls, config: SeriesConfig, cache: SeriesCache | None = None
    ) -> SeriesService:
        """Build a service with the directories, layout and cache policy of ``config``."""
        if cache is None:
            cache = TTLSeriesCache() if config.cache.enabled else NullSeriesCache()
        return cls(
            resolver=SourceResolver.from_config(config.sources),
            extractors={
                SourceKind.XLSX: XlsxRowExtractor(config.sources.xlsx),
                SourceKind.JSON: JsonRowExtractor(),
            },
            cache=cache,
            cache_ttl=config.cache.ttl_seconds,
            default_mode=config.sources.default_source,
        )

    @property
    def resolver(self) -> SourceResolver:
        return self._resolver

    def get_series(
        self, day: date | str | None = None, mode: SourceMode | str | None = None
    ) -> SeriesResult:
        """Return the series for ``day``.

        ``day`` may be a ``date`` or a ``YYYY-MM-DD`` string; ``None`` means
        today in UTC.

        Raises
        ------
        SeriesError
            The classified failure of the last pipeline attempted.
        InvalidRequest
            If ``day`` is a string that is not a valid ``YYYY-MM-DD`` date.
        ValueError
            If ``mode`` is not a known source mode.
        """
        if isinstance(day, datetime):
            day = day.date()
        elif not isinstance(day, date):
            day = parse_date(day)
        mode = self.default_mode if mode is None else SourceMode.parse(mode)
        key = (day, mode)

        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s/%s", day, mode.value)
            return cached

        if mode == SourceMode.AUTO:
            result = self._run_auto(day)
        else:
            result = self.run_pipeline(day, SourceKind(mode.value))

        self._cache.put(key, result, self._cache_ttl)
        logger.info(
            "Built %s series for %s from %s (%d slots)",
            result.source.value,
            day,
            result.file,
            len(result.labels),
        )
        return result

    def _run_auto(self, day: date) -> SeriesResult:
        primary, fallback = _AUTO_ORDER
        try:
            return self.run_pipeline(day, primary)
        except SeriesError as e:
            if not e.fallback_eligible:
                raise
            logger.warning(
                "%s source unavailable for %s (%s), falling back to %s",
                primary.value,
                day,
                e.code,
                fallback.value,
            )
        return self.run_pipeline(day, fallback)

    def run_pipeline(self, day: date, kind: SourceKind) -> SeriesResult:
        """Run one source's pipeline without touching the cache."""
        path = None
        try:
            path = self._resolver.resolve(day, kind)
            extractor = self._extractors[kind]
            rows = extractor.load(path)
            tuples = extractor.extract(rows)
            return self._aggregator.aggregate(
                tuples, date=day, source=kind, file=path.name
            )
        except SeriesError as e:
            e.context.setdefault("source", kind.value)
            e.context.setdefault("date", day.isoformat())
            if path is not None:
                e.context.setdefault("file", path.name)
            raise
