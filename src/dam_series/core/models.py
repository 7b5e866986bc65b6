"""Data models: the canonical series shape and the engine's internal records."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Any

import pandas as pd
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# --- Type Aliases ---

SlotLabel = str

_LABEL_RE = re.compile(r"^([01]\d|2[0-3]):(00|30)$")

# --- Enumerations ---


class SourceKind(StrEnum):
    """Physical source formats the engine can read."""

    XLSX = "xlsx"
    JSON = "json"


class SourceMode(StrEnum):
    """Source-selection policy requested by a caller."""

    XLSX = "xlsx"
    JSON = "json"
    AUTO = "auto"

    @classmethod
    def parse(cls, value: str | SourceMode) -> SourceMode:
        """Case- and whitespace-insensitive lookup. Raises ValueError."""
        if isinstance(value, SourceMode):
            return value
        normalized = str(value).strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(
                f"Unknown source mode '{value}'. Expected one of: {choices}"
            ) from None


CacheKey = tuple[date, SourceMode]

# --- Engine records ---


@dataclass(frozen=True)
class RawTuple:
    """One extracted source row before slot snapping.

    ``price`` and ``volume`` are already parsed; ``None`` means absent.
    ``ordinal`` is the zero-based row position in the source (after the
    header), used as the time reference of last resort.
    """

    raw_time: Any
    raw_category: str | None
    price: float | None
    volume: float | None
    ordinal: int


@dataclass
class SlotAccumulator:
    """Running sums for one half-hour slot."""

    label: SlotLabel
    volume_sum: float = 0.0
    price_volume_sum: float = 0.0

    def add(self, volume: float, price: float | None) -> None:
        self.volume_sum += volume
        if price is not None:
            self.price_volume_sum += price * volume

    @property
    def vwap(self) -> float:
        if self.volume_sum > 0:
            return self.price_volume_sum / self.volume_sum
        return 0.0


# --- Series Models ---


class SeriesResult(BaseModel):
    """One trading day as index-aligned half-hour slots.

    This is the only shape consumers ever see. ``price`` holds the
    volume-weighted average price of each slot, ``volume`` the traded volume.
    The slot sequences are tuples, so a cached instance stays unchanged for
    every reader.
    """

    model_config = ConfigDict(frozen=True)

    date: date
    labels: tuple[SlotLabel, ...]
    price: tuple[float, ...]
    volume: tuple[float, ...]
    source: SourceKind
    file: str

    @field_validator("labels")
    @classmethod
    def labels_are_sorted_slots(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if not v:
            raise ValueError("labels must not be empty")
        for label in v:
            if not _LABEL_RE.match(label):
                raise ValueError(f"label '{label}' is not a half-hour HH:MM slot")
        for prev, cur in zip(v, v[1:]):
            if cur <= prev:
                raise ValueError(
                    f"labels must be strictly increasing, got '{prev}' then '{cur}'"
                )
        return v

    @field_validator("volume")
    @classmethod
    def volume_non_negative(cls, v: tuple[float, ...]) -> tuple[float, ...]:
        for value in v:
            if value < 0:
                raise ValueError(f"volume must be >= 0, got {value}")
        return v

    @model_validator(mode="after")
    def series_aligned(self) -> SeriesResult:
        n = len(self.labels)
        if len(self.price) != n or len(self.volume) != n:
            raise ValueError(
                f"labels ({n}), price ({len(self.price)}) and volume "
                f"({len(self.volume)}) must have the same length"
            )
        return self

    def points(self) -> Iterator[tuple[SlotLabel, float, float]]:
        """Yield ``(label, volume, price)`` per slot in time order."""
        yield from zip(self.labels, self.volume, self.price)

    def high(self) -> tuple[SlotLabel, float]:
        """Slot with the highest price (first one on ties)."""
        idx = max(range(len(self.price)), key=lambda i: (self.price[i], -i))
        return self.labels[idx], self.price[idx]

    def low(self) -> tuple[SlotLabel, float]:
        """Slot with the lowest price (first one on ties)."""
        idx = min(range(len(self.price)), key=lambda i: (self.price[i], i))
        return self.labels[idx], self.price[idx]

    def to_payload(self) -> dict[str, Any]:
        """Outbound wire shape shared by the API and the JSON CLI output."""
        return {
            "date": self.date.isoformat(),
            "labels": list(self.labels),
            "PRICE": list(self.price),
            "VOLUME": list(self.volume),
            "source": self.source.value,
            "file": self.file,
        }

    def to_frame(self) -> pd.DataFrame:
        """Slots as a DataFrame indexed by label with VOLUME and PRICE columns."""
        frame = pd.DataFrame(
            {"VOLUME": self.volume, "PRICE": self.price},
            index=pd.Index(self.labels, name="time"),
        )
        return frame


@dataclass(frozen=True)
class CacheEntry:
    """A cached success and its absolute expiry on the cache's clock."""

    value: SeriesResult
    expires_at: float
