# gauge_coverage/loaders/series_loader.py
from __future__ import annotations
from functools import partial
from pathlib import Path
import zipfile, io, logging
import numpy as np
import pandas as pd

from ..core.errors import NotFoundError, ParseError, SchemaMismatchError
from ..core.model import SERIES_COLUMNS
from ..core.normalize import parse_columns, to_date, to_float
from ..utils.detect import detect_kind

_LOG = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
_INF_TOKENS = {"inf": np.inf, "+inf": np.inf, "-inf": -np.inf}

# ---------- CSV normalization ----------
def _df_from_csv_bytes(buff: bytes, path: Path, sep: str, decimal: str) -> pd.DataFrame:
    try:
        raw = pd.read_csv(io.BytesIO(buff), sep=sep, dtype=str, keep_default_na=False, index_col=False)
    except UnicodeDecodeError as e:
        raise ParseError(f"not valid utf-8: {e.reason} at byte {e.start}", path=path) from e
    except pd.errors.EmptyDataError as e:
        raise SchemaMismatchError(f"{path.name}: no header row") from e
    except pd.errors.ParserError as e:
        raise ParseError(str(e), path=path) from e

    cmap = parse_columns(raw)
    if list(cmap) != list(SERIES_COLUMNS):
        raise SchemaMismatchError(
            f"{path.name}: expected exactly columns {list(SERIES_COLUMNS)}, found {list(cmap)}"
        )

    time = to_date(raw[cmap["time"]], "time", path, DATE_FORMAT)
    q_raw = raw[cmap["discharge"]].fillna("").astype(str).str.strip()
    inf_vals = q_raw.str.lower().map(_INF_TOKENS)
    discharge = to_float(q_raw.where(inf_vals.isna(), ""), "discharge", path, decimal)
    discharge = discharge.where(inf_vals.isna().to_numpy(), inf_vals.to_numpy(dtype=float))

    return pd.DataFrame({"time": time, "discharge": discharge.astype(float)})

# ---------- public loader ----------
def load(path: Path, *, sep: str = ",", decimal: str = ".") -> pd.DataFrame:
    """
    Accepts: a loose .csv file, or a .zip with CSV members (concatenated in archive order).
    Returns: DataFrame with columns time, discharge in source row order.
    """
    path = Path(path)
    if not path.exists():
        raise NotFoundError(f"series file not found: {path}")

    kind = detect_kind(path)
    if kind == "csv":
        return _df_from_csv_bytes(path.read_bytes(), path, sep, decimal)
    if kind != "csvzip":
        raise SchemaMismatchError(f"{path.name}: unsupported series file type")

    frames: list[pd.DataFrame] = []
    with zipfile.ZipFile(path, "r") as zf:
        members = [m for m in zf.namelist() if m.lower().endswith(".csv")]
        for member in members:
            frames.append(_df_from_csv_bytes(zf.read(member), path / member, sep, decimal))
    _LOG.debug("read %d CSV member(s) from %s", len(frames), path.name)
    return pd.concat(frames, ignore_index=True)

def make_loader(sep: str = ",", decimal: str = "."):
    """Bind the separators once so the joiner can call ``loader(path)`` per station."""
    return partial(load, sep=sep, decimal=decimal)
