"""Tests for YAML engine configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from pkgs.engine_runtime import EngineConfig, MetricConfig, load_config, save_config

REPO_ROOT = Path(__file__).resolve().parent.parent


class TestLoadConfig:
    """Test loading and validation."""

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "missing.yaml") == EngineConfig()

    def test_shipped_default_matches_models(self):
        cfg = load_config(REPO_ROOT / "configs" / "default.yaml")
        assert cfg == EngineConfig()
        assert cfg.metric.kind == "schwarzschild"
        assert cfg.initial_state.circular_orbit

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == EngineConfig()

    def test_partial_file(self, tmp_path):
        path = tmp_path / "partial.yaml"
        path.write_text("metric:\n  kind: flrw\n  curvature_k: -1.0\nintegrator:\n  steps: 5\n")
        cfg = load_config(path)
        assert cfg.metric.kind == "flrw"
        assert cfg.metric.curvature_k == -1.0
        assert cfg.integrator.steps == 5
        assert cfg.integrator.dt == 0.5

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config(path)

    @pytest.mark.parametrize("text", [
        "metric:\n  mass: -1.0\n",
        "metric:\n  kind: kerr\n",
        "initial_state:\n  position: [0.0, 1.0]\n",
        "output:\n  formats: [hdf5]\n",
    ])
    def test_invalid_values_rejected(self, tmp_path, text):
        path = tmp_path / "bad.yaml"
        path.write_text(text)
        with pytest.raises(ValidationError):
            load_config(path)


class TestSaveConfig:
    """Test writing configuration back to YAML."""

    def test_round_trip(self, tmp_path):
        cfg = EngineConfig(metric=MetricConfig(kind="minkowski", signature="mostly_minus", mass=2.0))
        path = tmp_path / "nested" / "engine.yaml"
        save_config(cfg, path)
        assert path.exists()
        assert load_config(path) == cfg
