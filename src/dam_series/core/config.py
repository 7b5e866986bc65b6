"""dam-series settings: source directories, spreadsheet layout, cache and API."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from dam_series.core.exceptions import ConfigError
from dam_series.core.models import SourceMode


class XlsxLayoutConfig(BaseModel):
    """Fixed positional layout of the spreadsheet export (0-based columns)."""

    model_config = ConfigDict(frozen=True)

    header_rows: int = 3
    time_col: int = 0
    category_col: int = 1
    price_col: int = 2
    volume_col: int = 4
    category: str = "ALL"

    @field_validator("header_rows", "time_col", "category_col", "price_col", "volume_col")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("row and column offsets must be >= 0")
        return v

    @field_validator("category")
    @classmethod
    def category_normalized(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("category must not be empty")
        return v

    @model_validator(mode="after")
    def columns_distinct(self) -> XlsxLayoutConfig:
        cols = [self.time_col, self.category_col, self.price_col, self.volume_col]
        if len(set(cols)) != len(cols):
            raise ValueError("time, category, price and volume columns must differ")
        return self


class SourcesConfig(BaseModel):
    """Where the daily exports are dropped and which one is preferred."""

    model_config = ConfigDict(frozen=True)

    xlsx_dir: str = "./data/power-xlsx"
    json_dir: str = "./data/power-json"
    default_source: SourceMode = SourceMode.AUTO
    xlsx_extension: str = ".xlsx"
    xlsx: XlsxLayoutConfig = XlsxLayoutConfig()

    @field_validator("default_source", mode="before")
    @classmethod
    def parse_source(cls, v: object) -> SourceMode:
        return SourceMode.parse(v)  # type: ignore[arg-type]

    @field_validator("xlsx_extension")
    @classmethod
    def extension_has_dot(cls, v: str) -> str:
        if not v.startswith("."):
            raise ValueError("xlsx_extension must start with '.'")
        return v.lower()


class CacheConfig(BaseModel):
    """Short-lived result cache."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    ttl_seconds: float = 60

    @field_validator("ttl_seconds")
    @classmethod
    def ttl_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("ttl_seconds must be > 0")
        return v


class APIConfig(BaseModel):
    """FastAPI server configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8000


class SeriesConfig(BaseModel):
    """Root configuration for the entire dam-series system."""

    model_config = ConfigDict(frozen=True)

    sources: SourcesConfig = SourcesConfig()
    cache: CacheConfig = CacheConfig()
    api: APIConfig = APIConfig()


# --- Loading ---

CONFIG_ENV_VAR = "DAM_SERIES_CONFIG"
DEFAULT_CONFIG_FILES = ("dam-series.yml", "dam-series.yaml")


def load_config(
    config_path: str | None = None,
    env_prefix: str = "DAM_SERIES_",
) -> SeriesConfig:
    """Build the SeriesConfig for a process.

    Sources, highest priority first:

    1. ``DAM_SERIES_*`` environment variables, ``__`` separating levels::

           DAM_SERIES_SOURCES__XLSX_DIR=/srv/dam/xlsx   ->  sources.xlsx_dir
           DAM_SERIES_SOURCES__XLSX__HEADER_ROWS=2      ->  sources.xlsx.header_rows
           DAM_SERIES_CACHE__ENABLED=false              ->  cache.enabled

    2. The YAML file: ``config_path``, else ``$DAM_SERIES_CONFIG``, else
       ``dam-series.yml``/``dam-series.yaml`` in the working directory.
    3. Model defaults (``./data/power-xlsx``, ``./data/power-json``, auto,
       60 s cache).

    Raises ConfigError for a missing or unreadable file and for values
    the models reject.
    """
    yaml_path = _resolve_config_path(config_path)
    settings = _load_yaml(yaml_path) if yaml_path is not None else {}
    settings = _merge_env_vars(settings, env_prefix)

    try:
        return SeriesConfig.model_validate(settings)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ConfigError(
            f"Invalid dam-series settings: {e}",
            context={"source": "load_config", "fields": fields},
        ) from e


def _resolve_config_path(explicit: str | None) -> Path | None:
    """Pick the YAML file; an explicitly named file must exist."""
    named = [(explicit, "config_path"), (os.environ.get(CONFIG_ENV_VAR), CONFIG_ENV_VAR)]
    for candidate, origin in named:
        if not candidate:
            continue
        path = Path(candidate)
        if not path.is_file():
            raise ConfigError(
                f"Config file not found: {candidate} (from {origin})",
                context={"field": origin, "value": candidate},
            )
        return path

    for name in DEFAULT_CONFIG_FILES:
        path = Path(name)
        if path.is_file():
            return path
    return None


def _load_yaml(path: Path) -> dict[str, Any]:
    """Read the settings mapping; an empty file means all defaults."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            f"Cannot read config file {path}: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse YAML config {path}: {e}",
            context={"field": "config_file", "value": str(path)},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"YAML config must be a mapping of sections (sources, cache, api), "
            f"got {type(data).__name__}",
            context={"field": "config_file", "value": str(path)},
        )
    return data


def _merge_env_vars(base: dict[str, Any], prefix: str) -> dict[str, Any]:
    """Return ``base`` with ``<prefix>SECTION__KEY`` variables laid over it.

    ``base`` is left untouched. ``<prefix>CONFIG`` names the file and is
    not a setting.
    """
    result = copy.deepcopy(base)
    config_key = f"{prefix}CONFIG"

    for key, value in sorted(os.environ.items()):
        if not key.startswith(prefix) or key == config_key:
            continue
        *sections, leaf = key[len(prefix) :].lower().split("__")

        target = result
        for section in sections:
            node = target.get(section)
            if not isinstance(node, dict):
                node = target[section] = {}
            target = node
        target[leaf] = _auto_cast(value)

    return result


def _auto_cast(value: str) -> str | int | float | bool:
    """Turn an env string into the bool/int/float it spells, else keep it."""
    lowered = value.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            continue
    return value
