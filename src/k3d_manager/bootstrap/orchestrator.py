"""Bootstrap orchestration entry point.

Wires the stages together: capability probing, then the step pipeline
(cluster creation first), then the post-provision summary. Each stage
starts only after the previous one completes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ..config import ManagerConfig
from ..shared.logging import get_logger
from .capabilities import CapabilityProber, CapabilitySet, OverlayLayout
from .errors import BootstrapError
from .fallback import FallbackResolver
from .helm import HelmClient
from .kubectl import KubectlClient
from .plan import BootstrapPlan
from .provisioner import ClusterProvisioner
from .readiness import ReadinessPoller
from .reporter import PostProvisionReporter, ProvisionSummary
from .sequencer import StepResult, StepSequencer
from .steps import Step, default_pipeline, overlay_names

logger = get_logger(__name__)


@dataclass
class BootstrapReport:
    """Everything a caller needs to know about a run."""

    plan: BootstrapPlan
    capabilities: CapabilitySet
    results: list[StepResult] = field(default_factory=list)
    summary: ProvisionSummary | None = None
    error: BootstrapError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def variant(self) -> str | None:
        return self.summary.variant if self.summary else None

    def result(self, name: str) -> StepResult | None:
        return next((r for r in self.results if r.name == name), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "plan": self.plan.to_dict(),
            "capabilities": self.capabilities.to_dict(),
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict() if self.summary else None,
            "error": self.error.to_dict() if self.error else None,
        }


def probe_capabilities(prober: CapabilityProber, steps: list[Step]) -> CapabilitySet:
    """Probe binaries plus every overlay the pipeline can consume."""
    names = overlay_names(steps)
    return prober.probe(
        values=names["values"],
        manifests=names["manifests"],
        charts=names["charts"],
    )


def build_sequencer(
    config: ManagerConfig,
    steps: list[Step],
    on_result: Callable[[StepResult], None] | None = None,
) -> StepSequencer:
    """Build a sequencer with real collaborators from configuration."""
    kubectl = KubectlClient()
    return StepSequencer(
        steps,
        provisioner=ClusterProvisioner(
            image=config.k3s_image,
            scratch_dir=config.scratch_dir,
            settle_seconds=config.settle_seconds,
        ),
        kubectl=kubectl,
        helm=HelmClient(),
        resolver=FallbackResolver(layout_from_config(config), config.scratch_dir),
        poller=ReadinessPoller(kubectl, interval_seconds=config.poll_interval),
        on_result=on_result,
    )


def layout_from_config(config: ManagerConfig) -> OverlayLayout:
    return OverlayLayout(
        values_dir=config.values_dir,
        manifests_dir=config.manifests_dir,
        charts_dir=config.charts_dir,
    )


async def run_bootstrap(
    plan: BootstrapPlan,
    config: ManagerConfig | None = None,
    steps: list[Step] | None = None,
    prober: CapabilityProber | None = None,
    sequencer: StepSequencer | None = None,
    reporter: PostProvisionReporter | None = None,
    tolerate_failure: bool = False,
    on_result: Callable[[StepResult], None] | None = None,
) -> BootstrapReport:
    """Provision a cluster and its component stack.

    Args:
        plan: Resolved plan.
        config: Manager configuration (default: ManagerConfig()).
        steps: Pipeline (default: default_pipeline()).
        prober: Capability prober (default: built from config).
        sequencer: Step sequencer (default: built from config).
        reporter: Summary builder.
        tolerate_failure: Build the summary even if the run aborted.
        on_result: Progress callback passed to the default sequencer.

    Returns:
        BootstrapReport with ordered results, summary and terminating error.
    """
    config = config or ManagerConfig()
    steps = steps if steps is not None else default_pipeline()
    prober = prober or CapabilityProber(layout_from_config(config))
    sequencer = sequencer or build_sequencer(config, steps, on_result)
    reporter = reporter or PostProvisionReporter()

    logger.info("bootstrap_started", **plan.to_dict())

    capabilities = probe_capabilities(prober, steps)
    logger.info("capabilities_probed", **capabilities.to_dict())

    outcome = await sequencer.run(plan, capabilities)
    report = BootstrapReport(
        plan=plan,
        capabilities=capabilities,
        results=outcome.results,
        error=outcome.error,
    )

    if outcome.aborted and not tolerate_failure:
        logger.error("bootstrap_aborted", error=str(outcome.error))
        return report

    report.summary = reporter.summarize(plan, outcome.results, basic=outcome.basic)
    logger.info("bootstrap_finished", variant=report.variant, succeeded=report.succeeded)
    return report
