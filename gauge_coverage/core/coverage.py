# gauge_coverage/core/coverage.py
from __future__ import annotations
from typing import Sequence
import numpy as np
import pandas as pd

from .model import StationSeries, CoverageResult

SPAN_ZERO_COVERAGE = 0.0
_ONE_DAY = pd.Timedelta(days=1)

def coverage(series: StationSeries) -> CoverageResult:
    """
    Share of the station's date range backed by a finite discharge reading.

    span_days      = max(time) - min(time) in days (scanned, input need not be sorted)
    observed_count = readings with finite discharge
    coverage       = observed_count / span_days, capped at 1.0

    A gap-free daily record has N readings over N-1 days, hence the cap.
    With fewer than two distinct dates span_days is 0 and coverage is 0.0.
    """
    df = series.df
    q = df["discharge"].to_numpy(dtype=float)
    observed = int(np.isfinite(q).sum())

    t = df["time"].dropna()
    if t.shape[0] < 2:
        return CoverageResult(coverage=SPAN_ZERO_COVERAGE, observed_count=observed, span_days=0.0)

    span_days = float((t.max() - t.min()) / _ONE_DAY)
    if span_days <= 0:
        return CoverageResult(coverage=SPAN_ZERO_COVERAGE, observed_count=observed, span_days=0.0)
    return CoverageResult(
        coverage=float(min(observed / span_days, 1.0)),
        observed_count=observed,
        span_days=span_days,
    )

def filter_by_coverage(series: Sequence[StationSeries], threshold: float) -> list[StationSeries]:
    """Stations with coverage strictly below ``threshold``, order preserved."""
    return [s for s in series if coverage(s).coverage < threshold]

def sort_by_coverage(series: Sequence[StationSeries]) -> list[StationSeries]:
    # sorted() is stable: ties keep input order
    return sorted(series, key=lambda s: coverage(s).coverage)

def coverage_table(series: Sequence[StationSeries]) -> pd.DataFrame:
    """One row per station: metadata, coverage figures, first/last date."""
    cols = ["id", "river", "station", "lon", "lat", "z", "catchment",
            "start", "end", "span_days", "observed_count", "coverage"]
    rows = []
    for s in series:
        res = coverage(s)
        r = s.record
        t = s.df["time"]
        rows.append({
            "id": r.id, "river": r.river, "station": r.station,
            "lon": r.lon, "lat": r.lat, "z": r.z, "catchment": r.catchment,
            "start": t.min() if len(t) else pd.NaT,
            "end": t.max() if len(t) else pd.NaT,
            "span_days": res.span_days,
            "observed_count": res.observed_count,
            "coverage": res.coverage,
        })
    return pd.DataFrame(rows, columns=cols)
