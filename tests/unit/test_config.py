"""Unit tests for manager configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from k3d_manager.config import (
    DEFAULT_K3S_IMAGE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_SETTLE_SECONDS,
    ENV_VARS,
    ManagerConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's K3D_MANAGER_* variables out of these tests."""
    for env_var in ENV_VARS.values():
        monkeypatch.delenv(env_var, raising=False)


class TestManagerConfig:
    """Tests for ManagerConfig dataclass."""

    def test_default_values(self):
        config = ManagerConfig()
        assert config.values_dir == Path("values")
        assert config.manifests_dir == Path("manifests")
        assert config.charts_dir == Path("charts")
        assert config.settle_seconds == DEFAULT_SETTLE_SECONDS
        assert config.poll_interval == DEFAULT_POLL_INTERVAL
        assert config.k3s_image == DEFAULT_K3S_IMAGE

    def test_override_sets_flag_source(self):
        config = ManagerConfig()
        config.override("values_dir", "/srv/values")
        assert config.values_dir == Path("/srv/values")
        assert config.get_source("values_dir") == "flag"

    def test_override_none_is_ignored(self):
        """Test an unset CLI flag leaves the value alone."""
        config = ManagerConfig()
        config.override("charts_dir", None)
        assert config.charts_dir == Path("charts")
        assert config.get_source("charts_dir") == "default"


class TestLoadConfig:
    """Tests for load_config()."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml")
        assert config.settle_seconds == DEFAULT_SETTLE_SECONDS
        assert config.get_source("settle_seconds") == "default"

    def test_file_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("settle_seconds: 2\nvalues_dir: /opt/values\n")

        config = load_config(path)
        assert config.settle_seconds == 2.0
        assert config.values_dir == Path("/opt/values")
        assert config.get_source("values_dir") == "config file"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        """Test environment variables take precedence over the config file."""
        path = tmp_path / "config.yaml"
        path.write_text("poll_interval: 3\n")
        monkeypatch.setenv("K3D_MANAGER_POLL_INTERVAL", "1.5")

        config = load_config(path)
        assert config.poll_interval == 1.5
        assert config.get_source("poll_interval") == "environment"

    def test_bad_env_value_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("K3D_MANAGER_SETTLE_SECONDS", "soon")
        config = load_config(tmp_path / "missing.yaml")
        assert config.settle_seconds == DEFAULT_SETTLE_SECONDS

    @pytest.mark.parametrize("raw", ["0", "-2", "nan"])
    def test_non_positive_poll_interval_ignored(self, tmp_path, monkeypatch, raw):
        """Test a poll interval that would spin the readiness loop falls back."""
        monkeypatch.setenv("K3D_MANAGER_POLL_INTERVAL", raw)
        config = load_config(tmp_path / "missing.yaml")
        assert config.poll_interval == DEFAULT_POLL_INTERVAL
        assert config.get_source("poll_interval") == "default"

    def test_out_of_range_file_values_ignored(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("poll_interval: 0\nsettle_seconds: -5\n")
        config = load_config(path)
        assert config.poll_interval == DEFAULT_POLL_INTERVAL
        assert config.settle_seconds == DEFAULT_SETTLE_SECONDS

    def test_zero_settle_allowed(self, tmp_path, monkeypatch):
        monkeypatch.setenv("K3D_MANAGER_SETTLE_SECONDS", "0")
        config = load_config(tmp_path / "missing.yaml")
        assert config.settle_seconds == 0.0
        assert config.get_source("settle_seconds") == "environment"

    def test_invalid_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("settle_seconds: [unclosed\n")
        config = load_config(path)
        assert config.settle_seconds == DEFAULT_SETTLE_SECONDS

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("colour: blue\nk3s_image: rancher/k3s:v1.29.0-k3s1\n")
        config = load_config(path)
        assert config.k3s_image == "rancher/k3s:v1.29.0-k3s1"
        assert not hasattr(config, "colour")
