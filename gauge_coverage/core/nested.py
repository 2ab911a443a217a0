# gauge_coverage/core/nested.py
from __future__ import annotations
from dataclasses import asdict
from typing import Iterable, Sequence, TypeVar
import numpy as np
import pandas as pd

from .model import StationRecord, StationSeries

META_COLUMNS: tuple[str, ...] = ("id", "river", "station", "lon", "lat", "z", "catchment", "source_path")

T = TypeVar("T", StationRecord, StationSeries)

def to_frame(series: Sequence[StationSeries]) -> pd.DataFrame:
    """
    Nested table: one row per station, metadata columns plus ``data``,
    whose cells hold the station's (time, discharge) frame.
    """
    frame = pd.DataFrame([asdict(s.record) for s in series], columns=list(META_COLUMNS))
    # fill element-wise so pandas/numpy never try to broadcast the frames
    data = np.empty(len(series), dtype=object)
    for i, s in enumerate(series):
        data[i] = s.df
    frame["data"] = data
    return frame

def unnest(nested) -> pd.DataFrame:
    """
    Long format: id, river, station, time, discharge.
    Accepts the output of to_frame or a sequence of StationSeries.
    """
    if isinstance(nested, pd.DataFrame):
        pairs = ((row["id"], row["river"], row["station"], row["data"])
                 for _, row in nested.iterrows())
    else:
        pairs = ((s.record.id, s.record.river, s.record.station, s.df) for s in nested)

    parts = []
    for sid, river, station, df in pairs:
        part = df.loc[:, ["time", "discharge"]].copy()
        part.insert(0, "station", station)
        part.insert(0, "river", river)
        part.insert(0, "id", sid)
        parts.append(part)
    if not parts:
        return pd.DataFrame(columns=["id", "river", "station", "time", "discharge"])
    return pd.concat(parts, ignore_index=True)

def _record(item) -> StationRecord:
    return item.record if isinstance(item, StationSeries) else item

def bounding_box(items: Iterable, pad: float = 0.0) -> tuple[float, float, float, float]:
    """(min_lon, min_lat, max_lon, max_lat) over records or series, widened by ``pad`` degrees."""
    recs = [_record(i) for i in items]
    if not recs:
        raise ValueError("bounding_box needs at least one station")
    lons = [r.lon for r in recs]
    lats = [r.lat for r in recs]
    return (
        max(min(lons) - pad, -180.0),
        max(min(lats) - pad, -90.0),
        min(max(lons) + pad, 180.0),
        min(max(lats) + pad, 90.0),
    )

def filter_by_river(items: Sequence[T], rivers: Iterable[str]) -> list[T]:
    """Keep stations on any of ``rivers`` (case-insensitive), order preserved."""
    wanted = {str(r).strip().lower() for r in rivers}
    return [i for i in items if _record(i).river.strip().lower() in wanted]
