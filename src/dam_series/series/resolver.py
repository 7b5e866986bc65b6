"""Source file discovery for a trading date."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from dam_series.core.config import SourcesConfig
from dam_series.core.exceptions import DirectoryMissing, FileNotFound
from dam_series.core.models import SourceKind

logger = logging.getLogger(__name__)


class SourceResolver:
    """Locates the export file for a date in the configured directories.

    - XLSX: any file whose name contains ``YYYYMMDD`` and ends with the
      spreadsheet extension (first by name), else exactly ``YYYY-MM-DD.xlsx``.
    - JSON: exactly ``YYYYMMDD.json``.

    A missing directory raises DirectoryMissing; a directory without a
    matching file raises FileNotFound. Both are SourceUnavailable, the only
    failures that let ``auto`` mode move on to the next source.
    """

    def __init__(
        self,
        xlsx_dir: Path | str,
        json_dir: Path | str,
        xlsx_extension: str = ".xlsx",
    ) -> None:
        self._dirs = {
            SourceKind.XLSX: Path(xlsx_dir),
            SourceKind.JSON: Path(json_dir),
        }
        self._xlsx_extension = xlsx_extension.lower()

    @classmethod
    def from_config(cls, config: SourcesConfig) -> SourceResolver:
        return cls(config.xlsx_dir, config.json_dir, config.xlsx_extension)

    def directory(self, kind: SourceKind) -> Path:
        return self._dirs[kind]

    def resolve(self, day: date, kind: SourceKind) -> Path:
        """Return the file holding ``day`` for the given source kind."""
        directory = self._dirs[kind]
        if not directory.is_dir():
            raise DirectoryMissing(
                f"{kind.value.upper()} directory not found: {directory}",
                context={"source": kind.value, "directory": str(directory)},
            )

        if kind == SourceKind.XLSX:
            path = self._find_xlsx(directory, day)
        else:
            path = self._find_json(directory, day)

        if path is None:
            raise FileNotFound(
                f"No {kind.value.upper()} file for {day.isoformat()}",
                context={
                    "source": kind.value,
                    "directory": str(directory),
                    "date": day.isoformat(),
                },
            )

        logger.debug("Resolved %s source for %s: %s", kind.value, day, path.name)
        return path

    def _find_xlsx(self, directory: Path, day: date) -> Path | None:
        digits = day.strftime("%Y%m%d")
        candidates = sorted(
            p
            for p in directory.iterdir()
            if digits in p.name
            and p.name.lower().endswith(self._xlsx_extension)
            and p.is_file()
        )
        if candidates:
            if len(candidates) > 1:
                logger.debug(
                    "%d XLSX files match %s, using %s",
                    len(candidates),
                    digits,
                    candidates[0].name,
                )
            return candidates[0]

        explicit = directory / f"{day.isoformat()}{self._xlsx_extension}"
        return explicit if explicit.is_file() else None

    def _find_json(self, directory: Path, day: date) -> Path | None:
        path = directory / f"{day.strftime('%Y%m%d')}.json"
        return path if path.is_file() else None
