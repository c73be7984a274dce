"""Cluster provisioning.

Renders the k3d topology for a plan, creates the cluster, and waits a
fixed settle period. k3d exposes no readiness condition between "create
returned" and "API server accepts work", so the settle is a plain delay.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from ..config import DEFAULT_K3S_IMAGE, DEFAULT_SETTLE_SECONDS
from ..shared.logging import get_logger
from ..shared.paths import ensure_dirs, get_topology_file
from . import templates
from .cluster import K3dClient
from .errors import ClusterCreateError
from .plan import BootstrapPlan

logger = get_logger(__name__)

# Load-balancer port mappings for `dev` clusters
DEV_PORTS = ["8080:80@loadbalancer", "8443:443@loadbalancer"]


class ClusterProvisioner:
    """Create clusters through k3d."""

    def __init__(
        self,
        k3d: K3dClient | None = None,
        image: str = DEFAULT_K3S_IMAGE,
        scratch_dir: Path | None = None,
        settle_seconds: float = DEFAULT_SETTLE_SECONDS,
        storage_path: str = templates.DEFAULT_STORAGE_PATH,
    ):
        """Initialize provisioner.

        Args:
            k3d: Cluster lifecycle client.
            image: k3s node image.
            scratch_dir: Where the rendered topology is written.
            settle_seconds: Fixed delay after creation.
            storage_path: Host path mounted into every node.
        """
        self.k3d = k3d or K3dClient()
        self.image = image
        self.scratch_dir = scratch_dir
        self.settle_seconds = settle_seconds
        self.storage_path = storage_path

    def render(self, plan: BootstrapPlan) -> Path:
        """Write the topology config for a plan.

        Returns:
            Path to the rendered file.

        Raises:
            ClusterCreateError: If the scratch directory is not writable.
        """
        path = get_topology_file(plan.name, self.scratch_dir)
        try:
            ensure_dirs(self.scratch_dir)
            path.write_text(templates.topology_yaml(plan, self.image, self.storage_path))
        except OSError as e:
            raise ClusterCreateError(
                f"cannot write cluster config to {path}: {e}",
                step="cluster",
                data={"cluster": plan.name, "path": str(path)},
            ) from e
        return path

    async def provision(self, plan: BootstrapPlan) -> str:
        """Create the cluster and wait for it to settle.

        On success k3d has switched the default kubeconfig context to
        the new cluster.

        Returns:
            Success message.

        Raises:
            ClusterCreateError: If k3d fails.
        """
        config_path = self.render(plan)
        logger.info("cluster_create", cluster=plan.name, config=str(config_path))

        success, msg = self.k3d.create(plan.name, config_path)
        if not success:
            raise ClusterCreateError(msg, step="cluster", data={"cluster": plan.name})

        logger.info("cluster_created", cluster=plan.name, settle_seconds=self.settle_seconds)
        if self.settle_seconds > 0:
            await asyncio.sleep(self.settle_seconds)
        return msg

    def provision_dev(self, name: str, workers: int = 2) -> tuple[bool, str]:
        """Create a single-server development cluster from flags.

        Args:
            name: Cluster name.
            workers: Worker node count.

        Returns:
            Tuple of (success, message).
        """
        logger.info("dev_cluster_create", cluster=name, workers=workers, image=self.image)
        return self.k3d.create_simple(
            name, servers=1, agents=workers, ports=DEV_PORTS, image=self.image
        )
