"""End-to-end tests for the ``scripts/run_simulation.py`` command-line runner."""

from __future__ import annotations

import importlib.util
import json
import sys
from pathlib import Path
from types import ModuleType

import polars as pl
import pytest
import yaml

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "run_simulation.py"


def _load_script() -> ModuleType:
    spec = importlib.util.spec_from_file_location("run_simulation", SCRIPT_PATH)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    sys.modules["run_simulation"] = module
    spec.loader.exec_module(module)
    return module


run_simulation = _load_script()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "shield.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "simulation": {
                    "n_missiles": 3,
                    "mirvs_per_missile": 2,
                    "decoys_per_warhead": 1,
                    "n_inventory": 15,
                    "n_trials": 40,
                }
            }
        ),
        encoding="utf-8",
    )
    return path


# ---------------------------------------------------------------------------
# Tests: configuration layering
# ---------------------------------------------------------------------------

class TestBuildConfig:

    def test_overrides_applied(self, config_file: Path) -> None:
        args = run_simulation.parse_args(
            [
                "--config", str(config_file),
                "--set", "pk_warhead=0.9",
                "--set", "n_inventory=7",
                "--trials", "12",
                "--doctrine", "sls",
            ]
        )
        cfg = run_simulation.build_config(args)
        assert cfg.pk_warhead == pytest.approx(0.9)
        assert cfg.n_inventory == 7
        assert cfg.n_trials == 12
        assert cfg.doctrine_mode.value == "sls"
        assert cfg.n_missiles == 3

    def test_malformed_override(self) -> None:
        with pytest.raises(ValueError, match="KEY=VALUE"):
            run_simulation._parse_overrides(["pk_warhead"])


# ---------------------------------------------------------------------------
# Tests: main
# ---------------------------------------------------------------------------

class TestMain:

    def test_outputs_without_charts(
        self, config_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        out_dir = tmp_path / "out"
        code = run_simulation.main(
            [
                "--config", str(config_file),
                "--output-dir", str(out_dir),
                "--no-charts",
                "--log-level", "WARNING",
            ]
        )
        assert code == 0
        assert "Sanity check:" in capsys.readouterr().out

        payload = json.loads((out_dir / "summary.json").read_text(encoding="utf-8"))
        assert payload["summary"]["n_trials"] == 40
        assert payload["summary"]["real_warheads"] == 6
        assert payload["metadata"]["seed"] == 42
        assert payload["config"]["doctrine_mode"] == "barrage"

        frame = pl.read_parquet(out_dir / "trials.parquet")
        assert frame.height == 40
        assert not list(out_dir.glob("*.html"))

    def test_charts_written(self, config_file: Path, tmp_path: Path) -> None:
        out_dir = tmp_path / "charts"
        code = run_simulation.main(
            [
                "--config", str(config_file),
                "--output-dir", str(out_dir),
                "--bins", "5",
                "--log-level", "WARNING",
            ]
        )
        assert code == 0
        assert (out_dir / "penetrated_histogram.html").exists()
        assert (out_dir / "shots_histogram.html").exists()

    def test_missing_config_fails(self, tmp_path: Path) -> None:
        code = run_simulation.main(
            ["--config", str(tmp_path / "missing.yaml"), "--log-level", "CRITICAL"]
        )
        assert code == 1

    def test_unknown_override_fails(self, config_file: Path) -> None:
        code = run_simulation.main(
            [
                "--config", str(config_file),
                "--set", "warp_speed=9",
                "--log-level", "CRITICAL",
            ]
        )
        assert code == 1

    def test_invalid_bins_fails(self, config_file: Path) -> None:
        code = run_simulation.main(
            ["--config", str(config_file), "--bins", "0", "--log-level", "CRITICAL"]
        )
        assert code == 1
