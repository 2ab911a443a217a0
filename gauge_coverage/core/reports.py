# gauge_coverage/core/reports.py
from __future__ import annotations
from pathlib import Path
from typing import Literal
import numpy as np
import pandas as pd
from scipy.io import savemat

ReportFormat = Literal["csv", "mat", "both"]

_STR_COLUMNS = ("id", "river", "station", "start", "end")

def _prepare(table: pd.DataFrame) -> pd.DataFrame:
    df_out = table.copy()
    for col in ("start", "end"):
        if col in df_out.columns:
            df_out[col] = pd.to_datetime(df_out[col]).dt.strftime("%Y-%m-%d").fillna("")
    for col in ("coverage", "span_days"):
        if col in df_out.columns:
            df_out[col] = df_out[col].astype(float).round(6)
    return df_out

def _write_csv(df_out: pd.DataFrame, out_csv: Path, title: str) -> None:
    out_csv.parent.mkdir(parents=True, exist_ok=True)
    df_out.to_csv(out_csv, index=False, encoding="utf-8")
    print(f"[OK] wrote report: {title} → {out_csv}")

def _to_mat_cellstr(seq: list[str]) -> np.ndarray:
    """Make a MATLAB column cell array from a list of strings."""
    seq2 = [("" if s is None else str(s)) for s in seq]
    arr = np.empty((len(seq2), 1), dtype=object)
    arr[:, 0] = seq2
    return arr

def _write_mat(df_out: pd.DataFrame, out_mat: Path, varname: str, title: str) -> None:
    """
    Save a MATLAB struct with one field per report column.
    Strings become cell arrays (Nx1), numerics become double (Nx1).
    """
    out_mat.parent.mkdir(parents=True, exist_ok=True)
    mat_struct = {}
    for col in df_out.columns:
        if col in _STR_COLUMNS or not pd.api.types.is_numeric_dtype(df_out[col]):
            mat_struct[col] = _to_mat_cellstr(df_out[col].astype(str).tolist())
        else:
            mat_struct[col] = df_out[col].to_numpy(dtype=float).reshape(-1, 1)
    savemat(out_mat, {varname: mat_struct})
    print(f"[OK] wrote report: {title} → {out_mat}")

def write_report(table: pd.DataFrame,
                 out_base: Path,
                 title: str,
                 fmt: ReportFormat = "csv",
                 mat_variable: str = "coverage") -> None:
    """
    Write the coverage table in the requested format.
    - out_base is a *base path without extension* (e.g., .../coverage)
    - fmt: "csv" | "mat" | "both"
    - mat_variable: MATLAB variable name of the struct
    """
    if fmt not in ("csv", "mat", "both"):
        raise ValueError(f"unknown report format {fmt!r}")
    if table.empty:
        print(f"[INFO] {title}: no stations; report skipped.")
        return
    df_out = _prepare(table)

    if fmt in ("csv", "both"):
        _write_csv(df_out, out_base.with_suffix(".csv"), title)
    if fmt in ("mat", "both"):
        _write_mat(df_out, out_base.with_suffix(".mat"), mat_variable, title)
