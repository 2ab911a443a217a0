# gauge_coverage/core/normalize.py
from __future__ import annotations
from pathlib import Path
import numpy as np
import pandas as pd

from .errors import ParseError, SchemaMismatchError

# header is line 1, first data row is line 2
HEADER_LINES = 1
NA_TOKENS = frozenset({"", "na", "nan", "-"})

def parse_columns(df: pd.DataFrame) -> dict[str, str]:
    """Map normalized (stripped, lower-case) header names to the raw column labels."""
    return {str(c).strip().lower(): c for c in df.columns}

def require_columns(df: pd.DataFrame, required, path: Path) -> dict[str, str]:
    cmap = parse_columns(df)
    missing = [c for c in required if c not in cmap]
    if missing:
        raise SchemaMismatchError(
            f"{Path(path).name}: missing required column(s) {missing}; found {list(cmap)}"
        )
    return cmap

def _line_of(pos: int) -> int:
    return pos + HEADER_LINES + 1

def _clean(s: pd.Series) -> pd.Series:
    return s.fillna("").astype(str).str.strip()

def to_str(s: pd.Series, column: str, path: Path, allow_empty: bool = True) -> pd.Series:
    out = _clean(s)
    if not allow_empty:
        empty = np.flatnonzero((out == "").to_numpy())
        if empty.size:
            raise ParseError("empty value", path=path, line=_line_of(int(empty[0])), column=column, value="")
    return out

def to_float(s: pd.Series, column: str, path: Path, decimal: str = ",",
             allow_missing: bool = True) -> pd.Series:
    """
    Strict decimal conversion. Tokens in NA_TOKENS become NaN (or raise when
    allow_missing is False); anything else that does not parse raises ParseError.
    """
    raw = _clean(s)
    text = raw.str.replace(decimal, ".", regex=False) if decimal != "." else raw
    values = pd.to_numeric(text.where(~text.str.lower().isin(NA_TOKENS), np.nan), errors="coerce")
    is_na = raw.str.lower().isin(NA_TOKENS).to_numpy()
    bad = values.isna().to_numpy() & ~is_na
    if not allow_missing:
        bad |= is_na
    idx = np.flatnonzero(bad)
    if idx.size:
        pos = int(idx[0])
        raise ParseError(f"cannot convert {raw.iloc[pos]!r} to a decimal number (decimal={decimal!r})",
                         path=path, line=_line_of(pos), column=column, value=raw.iloc[pos])
    return values.astype(float).reset_index(drop=True)

def to_date(s: pd.Series, column: str, path: Path, fmt: str = "%Y-%m-%d") -> pd.Series:
    raw = _clean(s)
    z = pd.to_datetime(raw, format=fmt, errors="coerce")
    idx = np.flatnonzero(z.isna().to_numpy())
    if idx.size:
        pos = int(idx[0])
        raise ParseError(f"cannot parse {raw.iloc[pos]!r} as date ({fmt})",
                         path=path, line=_line_of(pos), column=column, value=raw.iloc[pos])
    return z.reset_index(drop=True)

def check_range(values: pd.Series, low: float, high: float, column: str, path: Path) -> None:
    v = values.to_numpy(dtype=float)
    idx = np.flatnonzero(~np.isnan(v) & ((v < low) | (v > high)))
    if idx.size:
        pos = int(idx[0])
        raise ParseError(f"value {v[pos]} outside [{low}, {high}]",
                         path=path, line=_line_of(pos), column=column, value=v[pos])
