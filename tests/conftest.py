"""Shared test fixtures for k3d-manager tests.

This module provides in-memory stand-ins for the external collaborators
the bootstrap pipeline drives:
- FakeProvisioner: records cluster creation, optionally fails
- FakeKubectl: records manifest applies, optionally fails
- FakeHelm: records repo adds, index updates and installs, optionally fails
- FakePoller: reports readiness per selector
- FakeProber: returns a fixed CapabilitySet
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from k3d_manager.bootstrap import (
    BootstrapPlan,
    CapabilitySet,
    ClusterCreateError,
    FallbackResolver,
    OverlayLayout,
    ReadinessResult,
    StepSequencer,
    default_pipeline,
    resolve_plan,
)

# =============================================================================
# Fake collaborators
# =============================================================================


@dataclass
class FakeProvisioner:
    """Records provision() calls instead of running k3d."""

    fail: bool = False
    calls: list[str] = field(default_factory=list)

    async def provision(self, plan: BootstrapPlan) -> str:
        self.calls.append(plan.name)
        if self.fail:
            raise ClusterCreateError(
                f"Failed to create cluster '{plan.name}': port in use",
                step="cluster",
                data={"cluster": plan.name},
            )
        return f"Cluster '{plan.name}' created"


@dataclass
class FakeKubectl:
    """Records applied manifests."""

    fail_on: str | None = None  # substring of a manifest that makes apply fail
    applied: list[str] = field(default_factory=list)
    applied_files: list[Path] = field(default_factory=list)

    def apply(self, manifest: str) -> tuple[bool, str]:
        if self.fail_on and self.fail_on in manifest:
            return False, "kubectl apply failed: admission webhook denied the request"
        self.applied.append(manifest)
        return True, "configured"

    def apply_file(self, path: Path) -> tuple[bool, str]:
        self.applied_files.append(path)
        return True, f"Applied {path.name}"


@dataclass
class FakeHelm:
    """Records repo adds, index updates and installs."""

    fail_release: str | None = None
    repos: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    installs: list[dict[str, Any]] = field(default_factory=list)

    def add_repo(self, name: str, url: str) -> tuple[bool, str]:
        self.repos.append(name)
        return True, f"Repo '{name}' added"

    def update_repos(self, *names: str) -> tuple[bool, str]:
        self.updated.extend(names)
        return True, "Repos updated"

    def install(self, release: str, chart: str, namespace: str, **kwargs: Any) -> tuple[bool, str]:
        if release == self.fail_release:
            return False, f"Failed to install {release}: timed out waiting for the condition"
        self.installs.append({"release": release, "chart": chart, "namespace": namespace, **kwargs})
        return True, f"Release '{release}' installed in '{namespace}'"

    @property
    def releases(self) -> list[str]:
        return [i["release"] for i in self.installs]


@dataclass
class FakePoller:
    """Reports every selector ready except those in not_ready."""

    not_ready: set[str] = field(default_factory=set)
    waits: list[tuple[str, str, float]] = field(default_factory=list)

    async def wait_for_ready(
        self, selector: str, namespace: str, timeout_seconds: float, on_attempt=None
    ) -> ReadinessResult:
        self.waits.append((selector, namespace, timeout_seconds))
        if selector in self.not_ready:
            return ReadinessResult(
                ready=False,
                attempts=3,
                elapsed_seconds=timeout_seconds,
                ready_pods=0,
                total_pods=1,
                error=(
                    f"0/1 pods matching '{selector}' in '{namespace}' "
                    f"ready after {timeout_seconds:g}s"
                ),
            )
        return ReadinessResult(ready=True, attempts=1, ready_pods=1, total_pods=1)


@dataclass
class FakeProber:
    """Returns a fixed capability set and records what was asked for."""

    capabilities: CapabilitySet
    requests: list[dict[str, Any]] = field(default_factory=list)

    def probe(self, **kwargs: Any) -> CapabilitySet:
        self.requests.append({k: list(v) for k, v in kwargs.items()})
        return self.capabilities


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def plan() -> BootstrapPlan:
    return resolve_plan("test-cluster", servers=1, agents=2)


@pytest.fixture
def full_caps() -> CapabilitySet:
    return CapabilitySet.from_facts({"helm": True, "k3d": True, "kubectl": True})


@pytest.fixture
def basic_caps() -> CapabilitySet:
    return CapabilitySet.from_facts({"helm": False, "k3d": True, "kubectl": True})


@pytest.fixture
def layout(tmp_path: Path) -> OverlayLayout:
    return OverlayLayout(
        values_dir=tmp_path / "values",
        manifests_dir=tmp_path / "manifests",
        charts_dir=tmp_path / "charts",
    )


@pytest.fixture
def collaborators() -> dict[str, Any]:
    return {
        "provisioner": FakeProvisioner(),
        "kubectl": FakeKubectl(),
        "helm": FakeHelm(),
        "poller": FakePoller(),
    }


@pytest.fixture
def make_sequencer(layout, tmp_path, collaborators):
    """Build a StepSequencer over fake collaborators."""

    def _make(steps=None, on_result=None) -> StepSequencer:
        return StepSequencer(
            steps if steps is not None else default_pipeline(),
            resolver=FallbackResolver(layout, scratch_dir=tmp_path / "scratch"),
            on_result=on_result,
            **collaborators,
        )

    return _make


@pytest.fixture
def make_prober():
    """Build a FakeProber for a capability set."""
    return FakeProber
