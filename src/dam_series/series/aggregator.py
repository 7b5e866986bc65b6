"""Slot aggregation: folds extracted rows into the canonical series.

Several rows can land in one slot (bidding zones, duplicate or jittered
timestamps). They are combined by volume-weighted average price::

    VWAP(slot) = Σ(price · volume) / Σ(volume)

A row without a price still adds its volume to the slot total but
nothing to the weighted sum.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from dam_series.core.exceptions import NoUsableRows
from dam_series.core.models import RawTuple, SeriesResult, SlotAccumulator, SourceKind
from dam_series.series.labels import normalize_label

logger = logging.getLogger(__name__)


class SlotAggregator:
    """Builds a SeriesResult from RawTuples.

    Stateless; one instance can serve any number of aggregation passes.
    """

    def __init__(self, decimals: int = 2) -> None:
        self._decimals = decimals

    def accumulate(self, tuples: Iterable[RawTuple]) -> dict[str, SlotAccumulator]:
        """Sum volume and price·volume per slot label."""
        slots: dict[str, SlotAccumulator] = {}
        for t in tuples:
            if t.volume is None:
                continue
            # Negative volumes are dropped, not netted, so every slot stays >= 0
            if t.volume < 0:
                logger.warning(
                    "Skipping row %d with negative volume %s", t.ordinal, t.volume
                )
                continue

            label = normalize_label(t.raw_time, t.ordinal)
            acc = slots.get(label)
            if acc is None:
                acc = slots[label] = SlotAccumulator(label=label)
            acc.add(t.volume, t.price)
        return slots

    def aggregate(
        self,
        tuples: Iterable[RawTuple],
        *,
        date: date,
        source: SourceKind,
        file: str,
    ) -> SeriesResult:
        """Fold tuples into slots and emit the ordered, rounded series.

        Raises
        ------
        NoUsableRows
            If no tuple carries a usable volume.
        """
        slots = self.accumulate(tuples)
        if not slots:
            raise NoUsableRows(
                "No usable rows",
                context={"source": source.value, "file": file, "reason": "no_volume"},
            )

        labels = sorted(slots)
        volume = [round_half_up(slots[label].volume_sum, self._decimals) for label in labels]
        price = [round_half_up(slots[label].vwap, self._decimals) for label in labels]

        return SeriesResult(
            date=date,
            labels=labels,
            price=price,
            volume=volume,
            source=source,
            file=file,
        )


def round_half_up(value: float, decimals: int = 2) -> float:
    """Round to ``decimals`` places with halves away from zero.

    Works on the shortest decimal repr of ``value``, so ``10.125`` rounds to
    ``10.13`` even though its binary float sits just below the half.
    """
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))
