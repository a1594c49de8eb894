"""
Integration tests for the run_demo command-line runner.
"""

import json
import sys

import pandas as pd

import run_demo


def run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["run_demo.py", *args])
    return run_demo.main()


class TestDemoRunner:
    """End-to-end runs with the synthetic source."""

    def test_synthetic_run_writes_outputs(self, monkeypatch, tmp_path, capsys):
        out_dir = tmp_path / "outputs"
        data_dir = tmp_path / "data"

        code = run(monkeypatch, "--pair", "USD/JPY", "--seed", "7", "--periods", "60",
                   "--output", str(out_dir), "--data-dir", str(data_dir))

        assert code == 0
        assert (data_dir / "usdjpy.parquet").exists()
        assert (out_dir / "reports" / "usdjpy_analysis.md").exists()

        indicators = pd.read_parquet(out_dir / "usdjpy_indicators.parquet")
        assert len(indicators) == 60

        report = json.loads((out_dir / "reports" / "usdjpy_analysis.json").read_text())
        assert report["metadata"]["bars"] == 60
        assert "TECHNICAL ANALYSIS REPORT" in capsys.readouterr().out

    def test_file_source_reuses_cache(self, monkeypatch, tmp_path):
        data_dir = tmp_path / "data"
        assert run(monkeypatch, "--seed", "1", "--data-dir", str(data_dir),
                   "--output", str(tmp_path / "first")) == 0

        code = run(monkeypatch, "--source", "file", "--periods", "30",
                   "--data-dir", str(data_dir), "--output", str(tmp_path / "second"))
        assert code == 0

        report = json.loads((tmp_path / "second" / "reports" / "eurusd_analysis.json").read_text())
        assert report["metadata"]["bars"] == 30
        assert report["metadata"]["provenance"]["source"] == "file"

    def test_missing_cache_fails(self, monkeypatch, tmp_path):
        code = run(monkeypatch, "--source", "file", "--data-dir", str(tmp_path / "empty"),
                   "--output", str(tmp_path / "out"))
        assert code == 1

    def test_config_overrides(self, monkeypatch, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"key_levels": {"levels": 2}}))

        code = run(monkeypatch, "--seed", "2", "--config", str(config_path),
                   "--data-dir", str(tmp_path / "data"), "--output", str(tmp_path / "out"))
        assert code == 0

        report = json.loads((tmp_path / "out" / "reports" / "eurusd_analysis.json").read_text())
        assert set(report["key_levels"]["resistance"]) == {"R1", "R2"}

    def test_invalid_config(self, monkeypatch, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"volume": {"period": 3}}))

        assert run(monkeypatch, "--config", str(config_path), "--output", str(tmp_path / "out")) == 1
