"""Unit tests for k3d_manager.shared.paths module."""

from pathlib import Path

from k3d_manager.shared.paths import (
    CONFIG_FILE,
    MANAGER_DIR,
    SCRATCH_DIR,
    ensure_dirs,
    get_default_values_file,
    get_topology_file,
)


class TestPaths:
    """Tests for path constants and functions."""

    def test_manager_dir_is_in_home(self):
        """Test MANAGER_DIR is in user's home directory."""
        assert MANAGER_DIR == Path.home() / ".k3d-manager"

    def test_config_and_scratch_under_manager_dir(self):
        assert CONFIG_FILE == MANAGER_DIR / "config.yaml"
        assert SCRATCH_DIR == MANAGER_DIR / "scratch"

    def test_ensure_dirs_creates_structure(self, tmp_path):
        """Test ensure_dirs creates scratch and scratch/values."""
        scratch = tmp_path / "scratch"
        assert ensure_dirs(scratch) == scratch
        assert scratch.is_dir()
        assert (scratch / "values").is_dir()

    def test_ensure_dirs_is_idempotent(self, tmp_path):
        scratch = tmp_path / "scratch"
        ensure_dirs(scratch)
        ensure_dirs(scratch)
        assert scratch.is_dir()

    def test_topology_file(self, tmp_path):
        assert get_topology_file("demo", tmp_path) == tmp_path / "k3d-demo.yaml"

    def test_topology_file_default_location(self):
        assert get_topology_file("demo") == SCRATCH_DIR / "k3d-demo.yaml"

    def test_default_values_file(self, tmp_path):
        assert get_default_values_file("monitoring", tmp_path) == (
            tmp_path / "values" / "monitoring.yaml"
        )
