# gauge_coverage/core/errors.py
from __future__ import annotations
from pathlib import Path


class GaugeCoverageError(Exception):
    """Base exception for gauge_coverage errors."""


class SchemaMismatchError(GaugeCoverageError):
    """File columns do not match the expected layout."""


class ParseError(GaugeCoverageError):
    """A cell could not be converted to its declared type."""

    def __init__(self, message: str, *, path: Path | None = None, line: int | None = None,
                 column: str | None = None, value: object = None):
        self.path = path
        self.line = line
        self.column = column
        self.value = value
        where = []
        if path is not None:
            where.append(Path(path).name)
        if line is not None:
            where.append(f"line {line}")
        if column is not None:
            where.append(f"column '{column}'")
        prefix = f"{', '.join(where)}: " if where else ""
        super().__init__(f"{prefix}{message}")


class NotFoundError(GaugeCoverageError, FileNotFoundError):
    """Referenced file does not exist."""


class SeriesLoadError(GaugeCoverageError):
    """Loading the series of one station failed; ``cause`` holds the original error."""

    def __init__(self, station_id: str, cause: BaseException):
        self.station_id = station_id
        self.cause = cause
        super().__init__(f"station {station_id}: {type(cause).__name__}: {cause}")
