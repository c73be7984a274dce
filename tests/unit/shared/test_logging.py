"""Unit tests for k3d_manager.shared.logging module."""

import json

import pytest

from k3d_manager.shared.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers a test installed (closing any log file)."""
    yield
    configure_logging()


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_log_file_gets_json_lines(self, tmp_path):
        """Test events are appended to the log file as JSON objects."""
        log_file = tmp_path / "logs" / "run.log"
        configure_logging("info", log_file=log_file)

        get_logger("k3d_manager.tests.file").info("step_started", step="cluster", rank=0)

        entry = json.loads(log_file.read_text().splitlines()[-1])
        assert entry["event"] == "step_started"
        assert entry["step"] == "cluster"
        assert entry["rank"] == 0
        assert entry["level"] == "info"
        assert entry["logger"] == "k3d_manager.tests.file"
        assert "timestamp" in entry

    def test_log_file_respects_level(self, tmp_path):
        log_file = tmp_path / "run.log"
        configure_logging("warning", log_file=log_file)

        logger = get_logger("k3d_manager.tests.level")
        logger.info("step_skipped", step="logging")
        logger.warning("basic_cluster_mode", reason="package manager unavailable")

        events = [json.loads(line)["event"] for line in log_file.read_text().splitlines()]
        assert events == ["basic_cluster_mode"]

    def test_json_stderr_without_file(self, capsys):
        configure_logging("info", json_output=True)

        get_logger("k3d_manager.tests.stderr").info("cluster_created", cluster="demo")

        entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert entry["event"] == "cluster_created"
        assert entry["cluster"] == "demo"
