# gauge_coverage/loaders/metadata_loader.py
from __future__ import annotations
from pathlib import Path
import io, logging
import pandas as pd

from ..core.errors import NotFoundError, ParseError, SchemaMismatchError
from ..core.model import StationRecord
from ..core.normalize import require_columns, to_str, to_float, check_range, HEADER_LINES

_LOG = logging.getLogger(__name__)

REQUIRED_COLUMNS: tuple[str, ...] = ("filename", "id", "river", "station", "lon", "lat", "z", "catchment")

def default_sep(decimal: str) -> str:
    """Comma decimals come with semicolon-separated files, period decimals with commas."""
    return ";" if decimal == "," else ","

def _df_from_bytes(buff: bytes, sep: str, encoding: str, path: Path) -> pd.DataFrame:
    # every cell as text; conversion happens against the explicit schema below.
    # index_col=False: a trailing delimiter must not turn the first column into the index
    try:
        return pd.read_csv(io.BytesIO(buff), sep=sep, dtype=str, keep_default_na=False,
                           encoding=encoding, skipinitialspace=True, index_col=False)
    except UnicodeDecodeError as e:
        raise ParseError(f"not valid {encoding}: {e.reason} at byte {e.start}", path=path) from e
    except pd.errors.EmptyDataError as e:
        raise SchemaMismatchError(f"{path.name}: no header row") from e
    except pd.errors.ParserError as e:
        raise ParseError(str(e), path=path) from e

def load(path: Path, base_dir: Path | None = None, *, decimal: str = ",",
         sep: str | None = None, encoding: str = "utf-8") -> list[StationRecord]:
    """
    Read station metadata.
    Header must name at least: filename, id, river, station, lon, lat, z, catchment.
    Returns one StationRecord per data row, in file order. ``filename`` is resolved
    against ``base_dir`` (default: the metadata file's folder) but not read.
    """
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"metadata file not found: {path}")
    base_dir = Path(base_dir) if base_dir is not None else path.parent
    sep = sep or default_sep(decimal)

    df = _df_from_bytes(path.read_bytes(), sep, encoding, path)
    cmap = require_columns(df, REQUIRED_COLUMNS, path)

    filenames = to_str(df[cmap["filename"]], "filename", path, allow_empty=False)
    ids       = to_str(df[cmap["id"]], "id", path, allow_empty=False)
    rivers    = to_str(df[cmap["river"]], "river", path)
    stations  = to_str(df[cmap["station"]], "station", path)
    lon       = to_float(df[cmap["lon"]], "lon", path, decimal, allow_missing=False)
    lat       = to_float(df[cmap["lat"]], "lat", path, decimal, allow_missing=False)
    z         = to_float(df[cmap["z"]], "z", path, decimal)
    catchment = to_float(df[cmap["catchment"]], "catchment", path, decimal)
    check_range(lon, -180.0, 180.0, "lon", path)
    check_range(lat, -90.0, 90.0, "lat", path)

    seen: dict[str, int] = {}
    records: list[StationRecord] = []
    for pos in range(df.shape[0]):
        sid = ids.iloc[pos]
        line = pos + HEADER_LINES + 1
        if sid in seen:
            raise ParseError(f"duplicate station id {sid!r} (first seen on line {seen[sid]})",
                             path=path, line=line, column="id", value=sid)
        seen[sid] = line
        records.append(StationRecord(
            id=sid,
            river=rivers.iloc[pos],
            station=stations.iloc[pos],
            lon=float(lon.iloc[pos]),
            lat=float(lat.iloc[pos]),
            z=float(z.iloc[pos]),
            catchment=float(catchment.iloc[pos]),
            source_path=(base_dir / filenames.iloc[pos]).resolve(),
        ))

    _LOG.info("loaded %d station record(s) from %s", len(records), path.name)
    return records
