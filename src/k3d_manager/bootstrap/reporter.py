"""Post-provision summary.

Read-only formatting of what a run installed and how to reach it. The
full variant lists endpoints only for steps that succeeded; the basic
variant is used when the package manager was unavailable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .plan import BootstrapPlan
from .sequencer import StepResult
from .templates import SAMPLE_APP_HOST

FULL = "full"
BASIC = "basic"


@dataclass
class Endpoint:
    """A reachable service."""

    name: str
    url: str
    step: str
    credentials: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {"name": self.name, "url": self.url, "step": self.step}
        if self.credentials:
            data["credentials"] = self.credentials
        return data


@dataclass
class ProvisionSummary:
    """Access information for a provisioned cluster."""

    variant: str
    cluster: str
    endpoints: list[Endpoint] = field(default_factory=list)
    credentials: list[str] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "variant": self.variant,
            "cluster": self.cluster,
            "endpoints": [e.to_dict() for e in self.endpoints],
            "credentials": list(self.credentials),
            "commands": list(self.commands),
            "notes": list(self.notes),
        }


# Endpoints each step contributes when it succeeds
STEP_ENDPOINTS: dict[str, list[Endpoint]] = {
    "ingress": [Endpoint("Ingress", "http://localhost", "ingress")],
    "monitoring": [
        Endpoint("Prometheus", "http://localhost:9090", "monitoring"),
        Endpoint("Grafana", "http://localhost:3000", "monitoring", credentials="admin/admin"),
    ],
    "logging": [Endpoint("Kibana", "http://localhost:5601", "logging")],
    "delivery-controller": [
        Endpoint("Argo CD", "http://localhost:8080", "delivery-controller", credentials="admin"),
    ],
    "sample-app": [Endpoint("Sample app", f"http://{SAMPLE_APP_HOST}", "sample-app")],
}

ARGOCD_PASSWORD_COMMAND = (
    "kubectl -n argocd get secret argocd-initial-admin-secret "
    '-o jsonpath="{.data.password}" | base64 -d'
)


class PostProvisionReporter:
    """Build the summary shown after a run."""

    def summarize(
        self,
        plan: BootstrapPlan,
        results: list[StepResult],
        basic: bool = False,
    ) -> ProvisionSummary:
        """Summarize a run.

        Args:
            plan: Plan the run used.
            results: Ordered step results.
            basic: True when the optional components were short-circuited.

        Returns:
            ProvisionSummary in the "basic" or "full" variant.
        """
        commands = [
            "kubectl get pods -A",
            f"kubectl config use-context {plan.context_name}",
            f"k3d cluster delete {plan.name}",
        ]

        if basic:
            return ProvisionSummary(
                variant=BASIC,
                cluster=plan.name,
                commands=commands,
                notes=["helm not found: optional components were skipped. Install helm and re-run."],
            )

        succeeded = {r.name for r in results if r.succeeded}
        summary = ProvisionSummary(variant=FULL, cluster=plan.name, commands=commands)

        for result in results:
            if result.name in succeeded:
                summary.endpoints.extend(STEP_ENDPOINTS.get(result.name, []))

        if "delivery-controller" in succeeded:
            summary.credentials.append(f"Argo CD password: {ARGOCD_PASSWORD_COMMAND}")
        if "sample-app" in succeeded:
            summary.notes.append(f"Add to /etc/hosts: 127.0.0.1 {SAMPLE_APP_HOST}")

        return summary
