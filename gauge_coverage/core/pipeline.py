# gauge_coverage/core/pipeline.py
from __future__ import annotations
from pathlib import Path
import logging
import pandas as pd

from ..loaders import metadata_loader
from ..loaders.series_loader import make_loader
from ..utils.detect import discover_series
from .coverage import coverage_table, filter_by_coverage, sort_by_coverage
from .join import join
from .nested import bounding_box, filter_by_river
from .plotting import save_hydrograph_plot, save_coverage_scatter
from .reports import write_report

_LOG = logging.getLogger(__name__)

def _report_unreferenced(series_dir: Path, records) -> None:
    referenced = {r.source_path for r in records}
    extra = [d.path for d in discover_series(series_dir) if d.path not in referenced]
    if extra:
        _LOG.warning("%d series file(s) in %s not referenced by metadata: %s",
                     len(extra), series_dir, ", ".join(p.name for p in extra[:10]))

def run_pipeline(cfg: dict, out_root: Path, base: Path | None = None) -> pd.DataFrame:
    """
    metadata -> join series -> coverage -> report/plots.
    Relative input paths resolve against ``base`` (default: cwd).
    Returns the coverage table (sorted ascending by coverage).
    """
    base = Path(base) if base is not None else Path.cwd()
    inp = cfg.get("input", {}) or {}
    meta_path = (base / inp["metadata"]).resolve()
    series_dir = (base / inp["series_dir"]).resolve() if inp.get("series_dir") else meta_path.parent

    records = metadata_loader.load(
        meta_path, series_dir,
        decimal=str(inp.get("decimal", ",")),
        sep=inp.get("sep"),
        encoding=str(inp.get("encoding", "utf-8")),
    )
    if series_dir.is_dir():
        _report_unreferenced(series_dir, records)

    ana = cfg.get("analysis", {}) or {}
    rivers = ana.get("rivers") or []
    if rivers:
        records = filter_by_river(records, rivers)
        _LOG.info("river filter %s keeps %d station(s)", rivers, len(records))

    jcfg = cfg.get("join", {}) or {}
    timeout = jcfg.get("timeout_s")
    result = join(
        records,
        make_loader(sep=str(inp.get("series_sep", ",")), decimal=str(inp.get("series_decimal", "."))),
        on_error=str(jcfg.get("on_error", "raise")),
        max_workers=jcfg.get("max_workers"),
        timeout=float(timeout) if timeout is not None else None,
    )
    series = result.series

    threshold = ana.get("coverage_threshold")
    if threshold is not None:
        series = filter_by_coverage(series, float(threshold))
        _LOG.info("coverage < %s: %d station(s)", threshold, len(series))
    series = sort_by_coverage(series)

    table = coverage_table(series)
    if series:
        _LOG.info("stations bbox (lon/lat): %s", bounding_box(series))

    out_root = Path(out_root)
    out_root.mkdir(parents=True, exist_ok=True)
    rep = cfg.get("reports", {}) or {}
    write_report(
        table, out_root / "coverage", "station coverage",
        fmt=str(rep.get("format", "csv")).lower(),
        mat_variable=str(rep.get("mat_variable", "coverage")),
    )
    if result.errors:
        errs = pd.DataFrame([{"id": e.station_id, "error": str(e.cause)} for e in result.errors])
        errs.to_csv(out_root / "load_errors.csv", index=False)
        print(f"[WARN] {len(result.errors)} station(s) failed to load → {out_root / 'load_errors.csv'}")

    plots = cfg.get("plots", {}) or {}
    if bool(plots.get("enabled", True)) and series:
        save_hydrograph_plot(series, out_root / "hydrographs.png", "Discharge",
                             legend_ncol=int(plots.get("legend_ncol", 4)))
        save_coverage_scatter(table, out_root / "coverage_scatter.png",
                              x=str(plots.get("scatter_x", "catchment")))
    return table
