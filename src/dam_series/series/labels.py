"""Half-hour slot labels.

Every raw time representation found in the exports is mapped onto one of
the 48 ``HH:MM`` labels of a trading day. Mapping never fails; when
nothing in the value is usable, the row's position decides the slot.

Snapping rule for clock times::

    minute  < 15  ->  HH:00
    minute  < 45  ->  HH:30
    minute >= 45  ->  (HH+1 mod 24):00

so ``09:07`` and ``09:14`` share the ``09:00`` bucket and ``23:50`` wraps
to ``00:00``.
"""

from __future__ import annotations

import re
import warnings
from typing import Any

import pandas as pd

SLOTS_PER_DAY = 48

_SLOT_INDEX_RE = re.compile(r"^\d{1,2}$")
_CLOCK_RE = re.compile(r"\b(\d{1,2}):(\d{2})\b")


def slot_label(index: int) -> str:
    """Label of a 0-based slot index, clamped to the day."""
    index = max(0, min(SLOTS_PER_DAY - 1, index))
    return f"{index // 2:02d}:{(index % 2) * 30:02d}"


HALF_HOUR_LABELS: tuple[str, ...] = tuple(slot_label(i) for i in range(SLOTS_PER_DAY))


def snap(hour: int, minute: int) -> str:
    """Snap a clock time to the nearest half-hour boundary."""
    hour = max(0, min(23, hour))
    if minute < 15:
        return f"{hour:02d}:00"
    if minute < 45:
        return f"{hour:02d}:30"
    return f"{(hour + 1) % 24:02d}:00"


def normalize_label(raw: Any, ordinal: int) -> str:
    """Map a raw time value to its ``HH:MM`` slot label.

    Tried in order: a 1-based slot number (``"1"``..``"48"``), an embedded
    ``H:MM``/``HH:MM`` clock time, any date-time string pandas can parse
    (taken in UTC), and finally the row ``ordinal``.
    """
    text = _as_text(raw)

    if text:
        if _SLOT_INDEX_RE.match(text):
            return slot_label(int(text) - 1)

        match = _CLOCK_RE.search(text)
        if match:
            return snap(int(match.group(1)), int(match.group(2)))

        parsed = _parse_datetime(text)
        if parsed is not None:
            return snap(parsed.hour, parsed.minute)

    return slot_label(ordinal)


def _as_text(raw: Any) -> str:
    if raw is None or isinstance(raw, bool):
        return ""
    if isinstance(raw, float):
        if raw != raw:  # NaN
            return ""
        if raw.is_integer():
            return str(int(raw))
    return str(raw).strip()


def _parse_datetime(text: str) -> pd.Timestamp | None:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            ts = pd.to_datetime(text, utc=True, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if ts is None or pd.isna(ts):
        return None
    return ts
