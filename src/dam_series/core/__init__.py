"""dam_series.core — Foundation types, config, and exceptions."""

from dam_series.core.config import (
    APIConfig,
    CacheConfig,
    SeriesConfig,
    SourcesConfig,
    XlsxLayoutConfig,
    load_config,
)
from dam_series.core.exceptions import (
    ConfigError,
    DamSeriesError,
    DirectoryMissing,
    FileNotFound,
    InvalidRequest,
    NoUsableRows,
    ParseFailure,
    SeriesError,
    SourceUnavailable,
)
from dam_series.core.models import (
    CacheEntry,
    CacheKey,
    RawTuple,
    SeriesResult,
    SlotAccumulator,
    SlotLabel,
    SourceKind,
    SourceMode,
)

__all__ = [
    # Type aliases
    "SlotLabel",
    "CacheKey",
    # Enums
    "SourceKind",
    "SourceMode",
    # Models
    "RawTuple",
    "SlotAccumulator",
    "SeriesResult",
    "CacheEntry",
    # Config
    "SeriesConfig",
    "SourcesConfig",
    "XlsxLayoutConfig",
    "CacheConfig",
    "APIConfig",
    "load_config",
    # Exceptions
    "DamSeriesError",
    "ConfigError",
    "InvalidRequest",
    "SeriesError",
    "SourceUnavailable",
    "DirectoryMissing",
    "FileNotFound",
    "ParseFailure",
    "NoUsableRows",
]
