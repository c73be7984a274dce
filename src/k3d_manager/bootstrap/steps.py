"""Step model and the static bootstrap pipeline.

A Step is one gated, ordered unit of work. The pipeline is a fixed list
sorted by rank; each rank depends on every lower rank having finished.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from . import templates
from .capabilities import CapabilitySet
from .plan import INSTALL_DELIVERY, INSTALL_LOGGING, INSTALL_MONITORING, BootstrapPlan


class ActionKind(Enum):
    """Collaborator call a step makes."""

    CREATE_CLUSTER = "create_cluster"
    APPLY_MANIFEST = "apply_manifest"
    INSTALL_PACKAGE = "install_package"


@dataclass(frozen=True)
class ReadinessWait:
    """Pods that must report Ready before the step counts as done."""

    selector: str
    namespace: str
    timeout_seconds: float = 300.0


@dataclass(frozen=True)
class ChartSpec:
    """Helm release coordinates for a package step."""

    release: str
    chart: str
    namespace: str
    version: str | None = None
    repo_name: str | None = None
    repo_url: str | None = None
    set_values: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Step:
    """One unit of the bootstrap pipeline."""

    name: str
    rank: int
    action: ActionKind
    feature: str | None = None  # plan flag gating the step
    requires: tuple[str, ...] = ()  # capabilities gating the step
    optional: bool = False  # part of the optional-component portion
    chart: ChartSpec | None = None
    manifest: templates.ManifestTemplate | None = None  # inline default manifest
    default_values: templates.ValuesTemplate | None = None
    values_overlay: bool = False
    manifest_overlay: bool = False
    chart_overlay: bool = False
    wait: ReadinessWait | None = None
    skippable: bool = False  # skip instead of fail when no payload exists

    def skip_reason(self, plan: BootstrapPlan, capabilities: CapabilitySet) -> str | None:
        """Return why the step should not run, or None if enabled."""
        if self.feature and not plan.enabled(self.feature):
            return f"feature '{self.feature}' disabled"
        missing = [name for name in self.requires if not capabilities.has(name)]
        if missing:
            return f"capability unavailable: {', '.join(missing)}"
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "rank": self.rank,
            "action": self.action.value,
            "feature": self.feature,
            "optional": self.optional,
        }


def default_pipeline() -> list[Step]:
    """The full production-like pipeline in rank order."""
    return [
        Step(name="cluster", rank=0, action=ActionKind.CREATE_CLUSTER),
        Step(
            name="cert-manager",
            rank=1,
            action=ActionKind.INSTALL_PACKAGE,
            optional=True,
            chart=ChartSpec(
                release="cert-manager",
                chart="jetstack/cert-manager",
                namespace="cert-manager",
                version="v1.13.2",
                repo_name="jetstack",
                repo_url="https://charts.jetstack.io",
            ),
            default_values=templates.cert_manager_values,
            values_overlay=True,
            wait=ReadinessWait(
                selector="app.kubernetes.io/instance=cert-manager",
                namespace="cert-manager",
                timeout_seconds=300,
            ),
        ),
        Step(
            name="cert-issuer",
            rank=2,
            action=ActionKind.APPLY_MANIFEST,
            optional=True,
            manifest=templates.cert_issuer_manifest,
            manifest_overlay=True,
        ),
        Step(
            name="ingress",
            rank=3,
            action=ActionKind.INSTALL_PACKAGE,
            optional=True,
            chart=ChartSpec(
                release="ingress-nginx",
                chart="ingress-nginx/ingress-nginx",
                namespace="ingress-nginx",
                version="4.8.3",
                repo_name="ingress-nginx",
                repo_url="https://kubernetes.github.io/ingress-nginx",
            ),
            default_values=templates.ingress_values,
            values_overlay=True,
            wait=ReadinessWait(
                selector="app.kubernetes.io/component=controller",
                namespace="ingress-nginx",
                timeout_seconds=300,
            ),
        ),
        Step(
            name="monitoring",
            rank=4,
            action=ActionKind.INSTALL_PACKAGE,
            feature=INSTALL_MONITORING,
            optional=True,
            chart=ChartSpec(
                release="monitoring",
                chart="prometheus-community/kube-prometheus-stack",
                namespace="monitoring",
                repo_name="prometheus-community",
                repo_url="https://prometheus-community.github.io/helm-charts",
            ),
            default_values=templates.monitoring_values,
            values_overlay=True,
            wait=ReadinessWait(
                selector="app.kubernetes.io/name=grafana",
                namespace="monitoring",
                timeout_seconds=600,
            ),
        ),
        Step(
            name="logging",
            rank=5,
            action=ActionKind.APPLY_MANIFEST,
            feature=INSTALL_LOGGING,
            optional=True,
            manifest=templates.logging_manifest,
            manifest_overlay=True,
            wait=ReadinessWait(selector="app=kibana", namespace="logging", timeout_seconds=600),
        ),
        Step(
            name="delivery-controller",
            rank=6,
            action=ActionKind.INSTALL_PACKAGE,
            feature=INSTALL_DELIVERY,
            optional=True,
            chart=ChartSpec(
                release="argocd",
                chart="argo/argo-cd",
                namespace="argocd",
                repo_name="argo",
                repo_url="https://argoproj.github.io/argo-helm",
            ),
            default_values=templates.delivery_values,
            values_overlay=True,
            wait=ReadinessWait(
                selector="app.kubernetes.io/name=argocd-server",
                namespace="argocd",
                timeout_seconds=300,
            ),
        ),
        Step(
            name="namespaces",
            rank=7,
            action=ActionKind.APPLY_MANIFEST,
            manifest=templates.namespaces_manifest,
            manifest_overlay=True,
        ),
        Step(
            name="network-policies",
            rank=8,
            action=ActionKind.APPLY_MANIFEST,
            manifest=templates.network_policies_manifest,
            manifest_overlay=True,
        ),
        Step(
            name="resource-quotas",
            rank=9,
            action=ActionKind.APPLY_MANIFEST,
            manifest=templates.resource_quotas_manifest,
            manifest_overlay=True,
        ),
        Step(
            name="rbac",
            rank=10,
            action=ActionKind.APPLY_MANIFEST,
            manifest=templates.rbac_manifest,
            manifest_overlay=True,
        ),
        Step(
            name="sample-app",
            rank=11,
            action=ActionKind.APPLY_MANIFEST,
            optional=True,
            chart=ChartSpec(release="sample-app", chart="", namespace="production"),
            manifest=templates.sample_app_manifest,
            manifest_overlay=True,
            values_overlay=True,
            chart_overlay=True,
            wait=ReadinessWait(selector="app=nginx", namespace="production", timeout_seconds=180),
        ),
    ]


def overlay_names(steps: list[Step]) -> dict[str, list[str]]:
    """Step names grouped by the overlay kinds they accept, for probing."""
    return {
        "values": [s.name for s in steps if s.values_overlay],
        "manifests": [s.name for s in steps if s.manifest_overlay],
        "charts": [s.name for s in steps if s.chart_overlay],
    }
