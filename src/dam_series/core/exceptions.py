"""Custom exception hierarchy for dam-series."""

from typing import Any


class DamSeriesError(Exception):
    """Base exception for all dam-series errors.

    All exceptions carry an optional `context` dict for structured error
    metadata that can be logged or serialized without parsing the message.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(DamSeriesError):
    """Invalid or missing configuration.

    Raised by load_config() during startup. Should be treated as fatal.

    Context keys:
        field: str — the config field that failed validation
        value: Any — the invalid value
    """


class InvalidRequest(DamSeriesError):
    """Malformed date or unknown source mode.

    Raised by the request-validation layers (HTTP, CLI) before the engine
    is invoked. The engine itself never raises it.

    Context keys:
        field: str — "date" or "source"
        value: Any — the rejected value
    """

    status_hint = 400


class SeriesError(DamSeriesError):
    """The engine could not produce a series.

    Every subclass carries a stable ``code``, an HTTP-style ``status_hint``
    and whether ``auto`` mode may fall back to the next source.

    Context keys:
        source: str — "xlsx" or "json"
        date: str — the requested date (YYYY-MM-DD)
        file: str | None — base name of the file involved
    """

    code = "series_error"
    status_hint = 500
    fallback_eligible = False

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": type(self).__name__, "code": self.code, "detail": str(self)}
        if self.context.get("file"):
            payload["file"] = self.context["file"]
        return payload


class SourceUnavailable(SeriesError):
    """The source is structurally absent for the requested date.

    Policy: ``auto`` mode falls back to the JSON source.
    """

    code = "source_unavailable"
    fallback_eligible = True


class DirectoryMissing(SourceUnavailable):
    """The configured source directory does not exist.

    Context keys:
        directory: str — the directory that was checked
    """

    code = "no_dir"


class FileNotFound(SourceUnavailable):
    """The directory exists but no file matches the date.

    Context keys:
        directory: str — the directory that was searched
    """

    code = "no_file"
    status_hint = 404


class ParseFailure(SeriesError):
    """The file exists but cannot be decoded.

    Policy: terminal. A malformed primary file is a data problem, so
    ``auto`` mode does not substitute the other source.

    Context keys:
        reason: str — decoder message
    """

    code = "parse_error"


class NoUsableRows(SeriesError):
    """The file decodes but yields no row with a present volume.

    Policy: terminal, same as ParseFailure.

    Context keys:
        reason: str — "empty", "no_rows_after_header", "no_category_rows"
            or "no_volume"
    """

    code = "no_rows"
