"""
Join gauging-station metadata with per-station discharge series and report coverage.
"""

from .core.coverage import coverage, coverage_table, filter_by_coverage, sort_by_coverage
from .core.errors import (
    GaugeCoverageError,
    NotFoundError,
    ParseError,
    SchemaMismatchError,
    SeriesLoadError,
)
from .core.join import JoinResult, join
from .core.model import CoverageResult, Reading, StationRecord, StationSeries
from .core.nested import bounding_box, filter_by_river, to_frame, unnest
from .loaders.metadata_loader import load as load_metadata
from .loaders.series_loader import load as load_series

__all__ = [
    "CoverageResult",
    "GaugeCoverageError",
    "JoinResult",
    "NotFoundError",
    "ParseError",
    "Reading",
    "SchemaMismatchError",
    "SeriesLoadError",
    "StationRecord",
    "StationSeries",
    "bounding_box",
    "coverage",
    "coverage_table",
    "filter_by_coverage",
    "filter_by_river",
    "join",
    "load_metadata",
    "load_series",
    "sort_by_coverage",
    "to_frame",
    "unnest",
]
