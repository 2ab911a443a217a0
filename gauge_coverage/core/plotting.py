# gauge_coverage/core/plotting.py
from __future__ import annotations
from pathlib import Path
from typing import Sequence
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .model import StationSeries

def _thin_xy(x, y, max_points: int):
    """Light decimator: keep at most max_points evenly spaced points."""
    n = len(x)
    if n <= max_points or max_points <= 0:
        return x, y
    idx = np.linspace(0, n - 1, max_points).astype(int)
    return x[idx], y[idx]

def save_hydrograph_plot(series_list: Sequence[StationSeries], out_path: Path, title: str,
                         legend_ncol: int = 4, max_points: int = 20000) -> Path | None:
    """Discharge vs time, one line per station. Gaps (NaN) stay gaps."""
    prepared = []
    for s in series_list:
        if s.df.empty:
            continue
        df = s.df.sort_values("time", kind="stable")
        x, y = _thin_xy(df["time"].to_numpy(), df["discharge"].to_numpy(dtype=float), max_points)
        prepared.append((x, y, f"{s.record.station} ({s.record.id})"))

    if not prepared:
        print(f"[INFO] {title}: no series with data; skipping hydrograph.")
        return None

    out_path.parent.mkdir(parents=True, exist_ok=True)
    plt.figure(figsize=(11, 6))
    for x, y, label in prepared:
        plt.plot(x, y, label=label, linewidth=0.8)
    plt.xlabel("Date")
    plt.ylabel("Discharge [m³/s]")
    plt.title(title)
    plt.grid(True, alpha=0.3)
    plt.legend(
        fontsize=8,
        ncol=legend_ncol,
        loc="upper center",
        bbox_to_anchor=(0.5, -0.15),
        frameon=False,
    )
    plt.tight_layout(rect=[0, 0.18, 1, 1])
    plt.savefig(out_path, dpi=160)
    plt.close()
    print(f"[OK] {title}: {len(prepared)} series → {out_path}")
    return out_path

def save_coverage_scatter(table: pd.DataFrame, out_path: Path, x: str = "catchment",
                          title: str = "Coverage") -> Path | None:
    """Coverage against a metadata column (catchment, z, ...), points annotated with station names."""
    if table.empty or x not in table.columns:
        print(f"[INFO] {title}: column '{x}' missing or table empty; skipping scatter.")
        return None

    out_path.parent.mkdir(parents=True, exist_ok=True)
    plt.figure(figsize=(8, 5))
    xs = table[x].to_list(); ys = table["coverage"].to_list()
    plt.scatter(xs, ys)
    for xv, yv, name in zip(xs, ys, table["station"].to_list()):
        plt.annotate(name, (xv, yv), fontsize=8, xytext=(5, 2), textcoords="offset points")
    plt.xlabel(x)
    plt.ylabel("Coverage [-]")
    plt.ylim(-0.02, 1.05)
    plt.title(title)
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close()
    print(f"[OK] coverage scatter → {out_path}")
    return out_path
