from pathlib import Path
import tempfile
import unittest

import pandas as pd
import yaml
from scipy.io import loadmat

from gauge_coverage.core.errors import SeriesLoadError
from gauge_coverage.core.pipeline import run_pipeline
from gauge_coverage.main import main


def _make_dataset(root: Path, broken_station: bool = False) -> None:
    series_dir = root / "data" / "series"
    series_dir.mkdir(parents=True)
    (root / "data" / "stations.csv").write_text("\n".join([
        "filename;id;river;station;lon;lat;z;catchment",
        "S1.csv;S1;Donau;Wien;16,3;48,2;200;500",
        "S2.csv;S2;Mur;Graz;15,4;47,1;350;1234,5",
        "S3.csv;S3;Donau;Linz;14,3;48,3;250;79490",
    ]) + "\n", encoding="utf-8")

    # S1: 11 dates (10-day span), 8 finite
    q1 = ["1.0", "2.0", "", "3.0", "4.0", "NA", "5.0", "6.0", "", "7.0", "8.0"]
    # S2: complete, S3: 2 of 10 days
    q2 = ["1.5"] * 11
    q3 = ["2.0", "", "", "", "", "", "", "", "", "", "3.0"]
    days = pd.date_range("2020-01-01", periods=11, freq="D").strftime("%Y-%m-%d")
    for sid, q in (("S1", q1), ("S2", q2), ("S3", q3)):
        lines = ["time,discharge"] + [f"{d},{v}" for d, v in zip(days, q)]
        (series_dir / f"{sid}.csv").write_text("\n".join(lines) + "\n", encoding="utf-8")
    if broken_station:
        (series_dir / "S2.csv").write_text("time,discharge\nyesterday,1\n", encoding="utf-8")
    (series_dir / "orphan.csv").write_text("time,discharge\n", encoding="utf-8")


def _cfg(**overrides) -> dict:
    cfg = {
        "input": {"metadata": "data/stations.csv", "series_dir": "data/series", "decimal": ","},
        "join": {"max_workers": 2, "on_error": "raise"},
        "analysis": {"rivers": [], "coverage_threshold": None},
        "output": {"root": "out"},
        "reports": {"format": "csv", "mat_variable": "coverage"},
        "plots": {"enabled": False},
        "logging": {"verbose": False},
    }
    for section, values in overrides.items():
        cfg[section].update(values)
    return cfg


class PipelineTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_report_sorted_by_coverage(self):
        _make_dataset(self.root)
        out_root = self.root / "out"

        table = run_pipeline(_cfg(), out_root, base=self.root)

        self.assertEqual(["S3", "S1", "S2"], table["id"].tolist())
        self.assertAlmostEqual(0.8, table.set_index("id").loc["S1", "coverage"])
        report = pd.read_csv(out_root / "coverage.csv")
        self.assertEqual(["S3", "S1", "S2"], report["id"].astype(str).tolist())
        self.assertEqual("2020-01-11", report.loc[0, "end"])

    def test_river_and_threshold_filters(self):
        _make_dataset(self.root)
        cfg = _cfg(analysis={"rivers": ["donau"], "coverage_threshold": 0.5})
        table = run_pipeline(cfg, self.root / "out", base=self.root)
        self.assertEqual(["S3"], table["id"].tolist())

    def test_mat_report_and_plots(self):
        _make_dataset(self.root)
        out_root = self.root / "out"
        cfg = _cfg(reports={"format": "both"}, plots={"enabled": True})
        run_pipeline(cfg, out_root, base=self.root)

        self.assertTrue((out_root / "coverage.csv").exists())
        self.assertTrue((out_root / "hydrographs.png").exists())
        self.assertTrue((out_root / "coverage_scatter.png").exists())
        mat = loadmat(out_root / "coverage.mat", squeeze_me=True, struct_as_record=False)
        self.assertEqual(3, len(mat["coverage"].coverage))

    def test_fail_fast_and_collect(self):
        _make_dataset(self.root, broken_station=True)
        with self.assertRaises(SeriesLoadError) as ctx:
            run_pipeline(_cfg(), self.root / "out", base=self.root)
        self.assertEqual("S2", ctx.exception.station_id)

        table = run_pipeline(_cfg(join={"on_error": "collect"}), self.root / "out", base=self.root)
        self.assertEqual(["S3", "S1"], table["id"].tolist())
        errors = pd.read_csv(self.root / "out" / "load_errors.csv")
        self.assertEqual(["S2"], errors["id"].tolist())


class MainTests(unittest.TestCase):
    def test_cli_exit_codes(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _make_dataset(root, broken_station=True)
            cfg_path = root / "config.yaml"
            cfg_path.write_text(yaml.safe_dump(_cfg()), encoding="utf-8")
            self.assertEqual(1, main([str(cfg_path)]))

            cfg_path.write_text(yaml.safe_dump(_cfg(join={"on_error": "collect"})), encoding="utf-8")
            self.assertEqual(0, main([str(cfg_path)]))
            self.assertTrue((root / "out" / "coverage.csv").exists())

    def test_null_logging_and_output_sections_use_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _make_dataset(root)
            cfg = _cfg()
            cfg["logging"] = None
            cfg["output"] = None
            cfg_path = root / "config.yaml"
            cfg_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")

            self.assertEqual(0, main([str(cfg_path)]))
            self.assertTrue((root / "out" / "coverage.csv").exists())
