# gauge_coverage/main.py
from __future__ import annotations
from pathlib import Path
import argparse
import logging
import sys
import yaml

from .core.errors import GaugeCoverageError
from .core.pipeline import run_pipeline

_LOG = logging.getLogger(__name__)

def load_config(cfg_path: Path) -> dict:
    with cfg_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

def main(argv: list[str] | None = None) -> int:
    here = Path(__file__).resolve().parent
    parser = argparse.ArgumentParser(description="Join station metadata with discharge series and report coverage.")
    parser.add_argument("config", nargs="?", default=str(here / "config.yaml"), help="YAML config file")
    args = parser.parse_args(argv)

    # ---------- config ----------
    cfg_path = Path(args.config).resolve()
    cfg = load_config(cfg_path)

    verbose = bool((cfg.get("logging") or {}).get("verbose", True))
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING,
                        format="[%(levelname)s] %(name)s: %(message)s")

    if "metadata" not in (cfg.get("input") or {}):
        _LOG.error("config %s has no input.metadata entry", cfg_path)
        return 2

    out_root = (cfg_path.parent / (cfg.get("output") or {}).get("root", "out")).resolve()
    _LOG.info("config=%s", cfg_path)
    _LOG.info("output=%s", out_root)

    # ---------- run ----------
    try:
        table = run_pipeline(cfg, out_root, base=cfg_path.parent)
    except GaugeCoverageError as e:
        _LOG.error("%s", e)
        return 1

    _LOG.info("finished: %d station(s), mean coverage %.3f",
              len(table), float(table["coverage"].mean()) if len(table) else 0.0)
    return 0

if __name__ == "__main__":
    sys.exit(main())
