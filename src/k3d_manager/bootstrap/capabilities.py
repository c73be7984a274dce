"""Capability probing for the bootstrap pipeline.

This module answers "is it usable?" for every optional dependency: the
helm, k3d and kubectl binaries, and the overlay files and chart
directories a caller may drop next to the project. Probing is read-only
and never aborts a run; anything it cannot decide counts as unavailable.
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ..shared.logging import get_logger
from .errors import ProbeInconclusive
from .helm import HelmClient

logger = get_logger(__name__)

# Binary capabilities
HELM = "helm"
K3D = "k3d"
KUBECTL = "kubectl"

# Overlay directory capabilities
VALUES_DIR = "values-dir"
MANIFESTS_DIR = "manifests-dir"
CHARTS_DIR = "charts-dir"

# Trivial invocation used to check each binary responds (helm goes through HelmClient)
VERSION_COMMANDS = {
    K3D: ["k3d", "version"],
    KUBECTL: ["kubectl", "version", "--client"],
}

PROBE_TIMEOUT_SECONDS = 10


def values_capability(step: str) -> str:
    return f"values:{step}"


def manifest_capability(step: str) -> str:
    return f"manifest:{step}"


def chart_capability(step: str) -> str:
    return f"chart:{step}"


@dataclass(frozen=True)
class OverlayLayout:
    """Where external payloads live on the local filesystem."""

    values_dir: Path = Path("values")
    manifests_dir: Path = Path("manifests")
    charts_dir: Path = Path("charts")

    def values_file(self, step: str) -> Path:
        return self.values_dir / f"{step}.yaml"

    def manifest_file(self, step: str) -> Path:
        return self.manifests_dir / f"{step}.yaml"

    def chart_dir(self, step: str) -> Path:
        return self.charts_dir / step


@dataclass(frozen=True)
class CapabilitySet:
    """Immutable result of one probe run."""

    available: frozenset[str] = field(default_factory=frozenset)
    probed: frozenset[str] = field(default_factory=frozenset)

    def has(self, name: str) -> bool:
        return name in self.available

    @property
    def package_manager(self) -> bool:
        return self.has(HELM)

    def to_dict(self) -> dict[str, bool]:
        return {name: name in self.available for name in sorted(self.probed)}

    @classmethod
    def from_facts(cls, facts: dict[str, bool]) -> CapabilitySet:
        return cls(
            available=frozenset(name for name, ok in facts.items() if ok),
            probed=frozenset(facts),
        )


class CapabilityProber:
    """Detect which optional tools and overlays are present."""

    def __init__(
        self,
        layout: OverlayLayout | None = None,
        binaries: Iterable[str] = (HELM, K3D, KUBECTL),
        helm: HelmClient | None = None,
    ):
        """Initialize prober.

        Args:
            layout: Overlay locations to inspect.
            binaries: Binary capabilities to probe.
            helm: Client whose version call decides the helm capability.
        """
        self.layout = layout or OverlayLayout()
        self.binaries = tuple(binaries)
        self.helm = helm or HelmClient()

    def probe(
        self,
        values: Iterable[str] = (),
        manifests: Iterable[str] = (),
        charts: Iterable[str] = (),
    ) -> CapabilitySet:
        """Probe binaries and overlays.

        Args:
            values: Step names that accept a Helm values overlay.
            manifests: Step names that accept a manifest overlay.
            charts: Step names that accept a local chart directory.

        Returns:
            CapabilitySet keyed by capability name.
        """
        facts: dict[str, bool] = {}

        for binary in self.binaries:
            facts[binary] = self._resolve(binary, lambda b=binary: self._probe_binary(b))

        facts[VALUES_DIR] = self._resolve(VALUES_DIR, lambda: self._is_dir(self.layout.values_dir))
        facts[MANIFESTS_DIR] = self._resolve(
            MANIFESTS_DIR, lambda: self._is_dir(self.layout.manifests_dir)
        )
        facts[CHARTS_DIR] = self._resolve(CHARTS_DIR, lambda: self._is_dir(self.layout.charts_dir))

        for step in values:
            path = self.layout.values_file(step)
            facts[values_capability(step)] = self._resolve(
                values_capability(step), lambda p=path: self._is_file(p)
            )
        for step in manifests:
            path = self.layout.manifest_file(step)
            facts[manifest_capability(step)] = self._resolve(
                manifest_capability(step), lambda p=path: self._is_file(p)
            )
        for step in charts:
            path = self.layout.chart_dir(step) / "Chart.yaml"
            facts[chart_capability(step)] = self._resolve(
                chart_capability(step), lambda p=path: self._is_file(p)
            )

        return CapabilitySet.from_facts(facts)

    def _resolve(self, name: str, check) -> bool:
        """Run one check, mapping an inconclusive probe to unavailable."""
        try:
            available = check()
        except ProbeInconclusive as e:
            logger.info("probe_inconclusive", capability=name, reason=e.message)
            available = False
        logger.debug("probe_result", capability=name, available=available)
        return available

    def _probe_binary(self, binary: str) -> bool:
        if not shutil.which(binary):
            return False

        if binary == HELM:
            success, msg = self.helm.version()
            if not success:
                raise ProbeInconclusive(msg)
            return True

        cmd = VERSION_COMMANDS.get(binary, [binary, "version"])
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=PROBE_TIMEOUT_SECONDS,
            )
        except subprocess.TimeoutExpired:
            raise ProbeInconclusive(f"{binary} not responding (timeout)")
        except OSError as e:
            raise ProbeInconclusive(f"{binary} could not be executed: {e}")
        return result.returncode == 0

    def _is_dir(self, path: Path) -> bool:
        try:
            return path.is_dir()
        except OSError as e:
            raise ProbeInconclusive(f"cannot stat {path}: {e}")

    def _is_file(self, path: Path) -> bool:
        try:
            return path.is_file()
        except OSError as e:
            raise ProbeInconclusive(f"cannot stat {path}: {e}")
