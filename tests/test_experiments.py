"""
Tests for the experiment runners.
"""

import json

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import load_config, load_generator_params
from experiments import run_dynamic_generation, run_static_generation
from experiments.common import _make_serializable, resolve_params


class TestConfig:
    """Tests for YAML presets."""

    def test_generator_params_sections(self):
        """Presets exist for both runners."""
        params = load_generator_params()
        assert "default" in params["static"]
        assert "default" in params["dynamic"]

    def test_missing_config_raises(self):
        """Unknown configuration files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config("does_not_exist")

    def test_overrides_win(self):
        """Command-line values replace preset values; None keeps the preset."""
        params = resolve_params("static", "small", {"n": 50, "exponent": None})
        assert params["n"] == 50
        assert params["exponent"] == load_generator_params()["static"]["small"]["exponent"]

    def test_unknown_preset_raises(self):
        """Unknown preset names are rejected."""
        with pytest.raises(ValueError):
            resolve_params("static", "nope", {})

    def test_make_serializable_handles_nan(self):
        """NaN becomes null in JSON output."""
        assert _make_serializable({"a": float("nan")}) == {"a": None}


class TestRunners:
    """End-to-end runs on small graphs."""

    def test_static_runner(self, tmp_path):
        """The static runner writes a JSON summary."""
        code = run_static_generation.main([
            "--preset", "small", "--n", "500", "--tolerance", "0.5",
            "--no-powerlaw", "--output", str(tmp_path),
        ])
        assert code == 0
        files = list(tmp_path.glob("static_generation_*.json"))
        assert len(files) == 1
        summary = json.loads(files[0].read_text())
        assert summary["n_nodes"] == 500
        assert summary["within_tolerance"] is True

    def test_static_runner_invalid_input(self, tmp_path):
        """Invalid parameters exit with a non-zero code."""
        code = run_static_generation.main(["--n", "100", "--gamma", "1.5", "--no-save"])
        assert code == 1

    def test_dynamic_runner_verifies_replay(self, tmp_path):
        """The dynamic runner replays its stream and checks it."""
        code = run_dynamic_generation.main([
            "--preset", "moving", "--n", "300", "--steps", "5", "--verify", "--output", str(tmp_path),
        ])
        assert code == 0
        summary = json.loads(next(tmp_path.glob("dynamic_generation_*.json")).read_text())
        assert summary["verified"] is True
        assert len(summary["rounds"]) == 5
