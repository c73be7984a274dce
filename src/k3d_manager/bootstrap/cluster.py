"""k3d cluster lifecycle management.

This module wraps the k3d binary: create from a rendered config file,
create from flags (dev clusters), delete, and list.
"""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from pathlib import Path


@dataclass
class ClusterSummary:
    """One row of `k3d cluster list`."""

    name: str
    servers_running: int = 0
    servers_count: int = 0
    agents_running: int = 0
    agents_count: int = 0


class K3dClient:
    """Drive the k3d CLI."""

    def __init__(self, binary: str = "k3d"):
        """Initialize client.

        Args:
            binary: k3d executable name or path.
        """
        self.binary = binary

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        return subprocess.run(
            [self.binary] + args,
            capture_output=True,
            text=True,
        )

    def create(self, name: str, config_path: Path) -> tuple[bool, str]:
        """Create a cluster from a k3d Simple config file.

        The config sets updateDefaultKubeconfig and switchCurrentContext,
        so on success the caller's kubectl context points at the new cluster.

        Args:
            name: Cluster name.
            config_path: Rendered topology config.

        Returns:
            Tuple of (success, message).
        """
        try:
            result = self._run(["cluster", "create", name, "--config", str(config_path)])
            if result.returncode != 0:
                return False, f"Failed to create cluster '{name}': {result.stderr.strip()}"
            return True, f"Cluster '{name}' created"
        except FileNotFoundError:
            return False, "k3d not found. Is k3d installed?"
        except OSError as e:
            return False, str(e)

    def create_simple(
        self,
        name: str,
        servers: int = 1,
        agents: int = 2,
        ports: list[str] | None = None,
        image: str | None = None,
    ) -> tuple[bool, str]:
        """Create a cluster from flags and wait for it.

        Args:
            name: Cluster name.
            servers: Control-plane node count.
            agents: Worker node count.
            ports: Port mappings in k3d syntax (e.g. "8080:80@loadbalancer").
            image: k3s node image (default: k3d's bundled image).

        Returns:
            Tuple of (success, message).
        """
        args = [
            "cluster",
            "create",
            name,
            "--servers",
            str(servers),
            "--agents",
            str(agents),
        ]
        if image:
            args.extend(["--image", image])
        for port in ports or []:
            args.extend(["--port", port])
        args.append("--wait")

        try:
            result = self._run(args)
            if result.returncode != 0:
                return False, f"Failed to create cluster '{name}': {result.stderr.strip()}"
            return True, f"Cluster '{name}' created"
        except FileNotFoundError:
            return False, "k3d not found. Is k3d installed?"
        except OSError as e:
            return False, str(e)

    def delete(self, name: str) -> tuple[bool, str]:
        """Delete a cluster.

        Args:
            name: Cluster name.

        Returns:
            Tuple of (success, message).
        """
        try:
            result = self._run(["cluster", "delete", name])
            if result.returncode != 0:
                return False, f"Failed to delete cluster '{name}': {result.stderr.strip()}"
            return True, f"Cluster '{name}' deleted"
        except FileNotFoundError:
            return False, "k3d not found. Is k3d installed?"
        except OSError as e:
            return False, str(e)

    def list(self) -> list[ClusterSummary]:
        """List clusters known to k3d.

        Returns:
            List of ClusterSummary, empty if k3d is missing or fails.
        """
        try:
            result = self._run(["cluster", "list", "-o", "json"])
        except OSError:
            return []
        if result.returncode != 0 or not result.stdout.strip():
            return []

        try:
            raw = json.loads(result.stdout)
        except json.JSONDecodeError:
            return []

        clusters = []
        for item in raw:
            clusters.append(
                ClusterSummary(
                    name=item.get("name", "unknown"),
                    servers_running=item.get("serversRunning", 0),
                    servers_count=item.get("serversCount", 0),
                    agents_running=item.get("agentsRunning", 0),
                    agents_count=item.get("agentsCount", 0),
                )
            )
        return clusters
