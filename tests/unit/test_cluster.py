"""Unit tests for the k3d client."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

from k3d_manager.bootstrap import K3dClient


class TestK3dClient:
    """Tests for K3dClient."""

    def test_create_from_config(self):
        """Test create passes the rendered config file."""
        client = K3dClient()
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            success, msg = client.create("demo", Path("/tmp/k3d-demo.yaml"))

        assert success is True
        assert "demo" in msg
        args = mock_run.call_args[0][0]
        assert args == ["k3d", "cluster", "create", "demo", "--config", "/tmp/k3d-demo.yaml"]

    def test_create_failure(self):
        client = K3dClient()
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stderr="port 80 already allocated\n")
            success, msg = client.create("demo", Path("/tmp/k3d-demo.yaml"))

        assert success is False
        assert "port 80 already allocated" in msg

    def test_create_k3d_missing(self):
        client = K3dClient()
        with patch("subprocess.run", side_effect=FileNotFoundError()):
            success, msg = client.create("demo", Path("/tmp/k3d-demo.yaml"))

        assert success is False
        assert "k3d not found" in msg

    def test_create_simple_args(self):
        """Test dev-cluster flags, port mappings and --wait."""
        client = K3dClient()
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            client.create_simple("dev", servers=1, agents=2, ports=["8080:80@loadbalancer"])

        args = mock_run.call_args[0][0]
        assert args[:4] == ["k3d", "cluster", "create", "dev"]
        assert args[args.index("--servers") + 1] == "1"
        assert args[args.index("--agents") + 1] == "2"
        assert args[args.index("--port") + 1] == "8080:80@loadbalancer"
        assert args[-1] == "--wait"
        assert "--image" not in args

    def test_create_simple_image(self):
        client = K3dClient()
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            client.create_simple("dev", image="rancher/k3s:v1.28.5-k3s1")

        args = mock_run.call_args[0][0]
        assert args[args.index("--image") + 1] == "rancher/k3s:v1.28.5-k3s1"

    def test_delete(self):
        client = K3dClient()
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            success, msg = client.delete("demo")

        assert success is True
        assert mock_run.call_args[0][0] == ["k3d", "cluster", "delete", "demo"]

    def test_list_parses_json(self):
        payload = [
            {
                "name": "demo",
                "serversRunning": 1,
                "serversCount": 1,
                "agentsRunning": 2,
                "agentsCount": 2,
            }
        ]
        client = K3dClient()
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout=json.dumps(payload))
            clusters = client.list()

        assert len(clusters) == 1
        assert clusters[0].name == "demo"
        assert clusters[0].agents_running == 2

    def test_list_empty_on_failure(self):
        client = K3dClient()
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stdout="")
            assert client.list() == []

    def test_list_empty_on_bad_json(self):
        client = K3dClient()
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="not json")
            assert client.list() == []
