# gauge_coverage/utils/detect.py
from __future__ import annotations
from pathlib import Path
import zipfile
from dataclasses import dataclass
from typing import Literal

SeriesKind = Literal["csv", "csvzip", "unknown"]

@dataclass(frozen=True)
class DetectedItem:
    path: Path        # actual path on disk
    kind: SeriesKind

def _is_zip_with_csv(p: Path) -> bool:
    if not p.is_file():
        return False
    try:
        if not zipfile.is_zipfile(p):
            return False
        with zipfile.ZipFile(p, "r") as zf:
            return any(name.lower().endswith(".csv") for name in zf.namelist())
    except (zipfile.BadZipFile, OSError):
        return False

def detect_kind(p: Path) -> SeriesKind:
    """
    Classify a series file by suffix.
    - .csv / .txt -> 'csv'
    - .zip (with any .csv member) -> 'csvzip'
    else -> 'unknown'
    """
    suffix = p.suffix.lower()
    if suffix in (".csv", ".txt"):
        return "csv"
    if suffix == ".zip" and _is_zip_with_csv(p):
        return "csvzip"
    return "unknown"

def discover_series(root: Path, recurse: bool = False) -> list[DetectedItem]:
    """
    Collect series files under a folder (or the single file given).
    Useful to spot files not referenced by any metadata row.
    """
    root = Path(root)
    if root.is_file():
        kind = detect_kind(root)
        return [DetectedItem(root.resolve(), kind)] if kind != "unknown" else []

    it = root.rglob("*") if recurse else root.glob("*")
    items = [DetectedItem(p.resolve(), detect_kind(p)) for p in it if p.is_file()]
    items = [d for d in items if d.kind != "unknown"]
    # deterministic ordering
    items.sort(key=lambda x: (x.kind, str(x.path)))
    return items
