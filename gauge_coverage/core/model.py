# gauge_coverage/core/model.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple
import pandas as pd

SERIES_COLUMNS: tuple[str, str] = ("time", "discharge")

@dataclass(frozen=True)
class StationRecord:
    id: str                   # unique station key, e.g. 207852
    river: str
    station: str              # gauge name
    lon: float
    lat: float
    z: float                  # elevation [m a.s.l.]
    catchment: float          # catchment area [km²]
    source_path: Path         # series file, resolved against the base dir


class Reading(NamedTuple):
    time: pd.Timestamp
    discharge: float          # NaN when missing


def readings_frame(obj) -> pd.DataFrame:
    """
    Normalize a loader result into the canonical series frame.
    Accepts a DataFrame with ``time``/``discharge`` columns or an iterable of Reading.
    """
    if isinstance(obj, pd.DataFrame):
        missing = [c for c in SERIES_COLUMNS if c not in obj.columns]
        if missing:
            raise KeyError(f"series frame missing columns {missing}")
        df = obj.loc[:, list(SERIES_COLUMNS)].copy()
    else:
        rows = [tuple(r) for r in (obj if obj is not None else ())]
        df = pd.DataFrame(rows, columns=list(SERIES_COLUMNS))
    df["time"] = pd.to_datetime(df["time"])
    df["discharge"] = pd.to_numeric(df["discharge"]).astype(float)
    return df.reset_index(drop=True)


@dataclass(frozen=True)
class StationSeries:
    record: StationRecord
    df: pd.DataFrame          # canonical columns: time, discharge (source order)

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def readings(self) -> tuple[Reading, ...]:
        return tuple(Reading(t, float(q)) for t, q in zip(self.df["time"], self.df["discharge"]))

    def __len__(self) -> int:
        return int(self.df.shape[0])


@dataclass(frozen=True)
class CoverageResult:
    coverage: float           # observed_count / span_days, in [0, 1]; 0.0 when span_days == 0
    observed_count: int       # readings with finite discharge
    span_days: float          # max(time) - min(time) in days
