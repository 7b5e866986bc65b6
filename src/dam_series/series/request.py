"""Inbound request validation shared by the HTTP and CLI layers.

The engine trusts its inputs; this is where raw strings become a trading
date and a source mode, or an InvalidRequest.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime

from pydantic import BaseModel, ConfigDict

from dam_series.core.exceptions import InvalidRequest
from dam_series.core.models import SourceMode

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class SeriesRequest(BaseModel):
    """A validated ``(date, mode)`` pair."""

    model_config = ConfigDict(frozen=True)

    date: date
    mode: SourceMode

    @classmethod
    def parse(
        cls,
        date_str: str | None,
        source: str | None,
        default_source: SourceMode = SourceMode.AUTO,
    ) -> SeriesRequest:
        """Validate raw parameters.

        ``date_str`` must be ``YYYY-MM-DD`` and defaults to today in UTC;
        ``source`` is case-insensitive and defaults to ``default_source``.
        """
        return cls(date=parse_date(date_str), mode=parse_source(source, default_source))


def today_utc() -> date:
    return datetime.now(UTC).date()


def parse_date(value: str | None) -> date:
    if value is None or not str(value).strip():
        return today_utc()
    text = str(value).strip()
    if not _DATE_RE.match(text):
        raise InvalidRequest(
            f"Invalid date '{value}', expected YYYY-MM-DD",
            context={"field": "date", "value": value},
        )
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise InvalidRequest(
            f"Invalid date '{value}': {e}",
            context={"field": "date", "value": value},
        ) from e


def parse_source(value: str | None, default: SourceMode = SourceMode.AUTO) -> SourceMode:
    if value is None or not str(value).strip():
        return default
    try:
        return SourceMode.parse(value)
    except ValueError as e:
        raise InvalidRequest(str(e), context={"field": "source", "value": value}) from e
