"""Step sequencing for the bootstrap pipeline.

Runs the static step list strictly in rank order, one step at a time.
Each step is gated, resolved, executed, and (optionally) waited on. The
first failure stops the run; results recorded before it are kept as-is.
There is no rollback.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..shared.logging import get_logger
from .capabilities import CapabilitySet
from .errors import BootstrapError, ReadinessTimeoutError, StepActionError
from .fallback import FallbackResolver, Payload
from .helm import HelmClient
from .kubectl import KubectlClient
from .plan import BootstrapPlan
from .provisioner import ClusterProvisioner
from .readiness import ReadinessPoller
from .steps import ActionKind, Step

logger = get_logger(__name__)

PACKAGE_MANAGER_UNAVAILABLE = "package manager unavailable"


class StepStatus(Enum):
    """Terminal state of a step."""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class StepResult:
    """Outcome of one step."""

    name: str
    rank: int
    status: StepStatus
    reason: str | None = None
    payload_source: str | None = None
    message: str | None = None
    error: BootstrapError | None = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == StepStatus.SUCCEEDED

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "rank": self.rank,
            "status": self.status.value,
            "duration_seconds": round(self.duration_seconds, 2),
        }
        if self.reason:
            data["reason"] = self.reason
        if self.payload_source:
            data["payload_source"] = self.payload_source
        if self.message:
            data["message"] = self.message
        if self.error:
            data["error"] = self.error.to_dict()
        return data


@dataclass
class SequenceOutcome:
    """Ordered results plus the error that stopped the run, if any."""

    results: list[StepResult] = field(default_factory=list)
    error: BootstrapError | None = None
    basic: bool = False

    @property
    def aborted(self) -> bool:
        return self.error is not None


class StepSequencer:
    """Execute pipeline steps in rank order."""

    def __init__(
        self,
        steps: list[Step],
        provisioner: ClusterProvisioner | None = None,
        kubectl: KubectlClient | None = None,
        helm: HelmClient | None = None,
        resolver: FallbackResolver | None = None,
        poller: ReadinessPoller | None = None,
        on_result: Callable[[StepResult], None] | None = None,
    ):
        """Initialize sequencer.

        Args:
            steps: Pipeline; ranks and names must be unique.
            provisioner: Runs CREATE_CLUSTER steps.
            kubectl: Runs APPLY_MANIFEST steps.
            helm: Runs INSTALL_PACKAGE steps.
            resolver: Chooses each step's payload.
            poller: Runs readiness waits.
            on_result: Optional callback called with each StepResult as it
                      is recorded, for progress reporting.
        """
        ranks = [s.rank for s in steps]
        names = [s.name for s in steps]
        if len(set(ranks)) != len(ranks):
            raise ValueError(f"duplicate step ranks: {sorted(ranks)}")
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate step names: {names}")

        self.steps = sorted(steps, key=lambda s: s.rank)
        self.provisioner = provisioner or ClusterProvisioner()
        self.kubectl = kubectl or KubectlClient()
        self.helm = helm or HelmClient()
        self.resolver = resolver or FallbackResolver()
        self.poller = poller or ReadinessPoller(self.kubectl)
        self.on_result = on_result

    async def run(self, plan: BootstrapPlan, capabilities: CapabilitySet) -> SequenceOutcome:
        """Run every step in order, stopping at the first failure.

        Args:
            plan: Immutable plan for this run.
            capabilities: Immutable probe result for this run.

        Returns:
            SequenceOutcome with one result per step reached.
        """
        basic = not capabilities.package_manager
        if basic:
            logger.warning("basic_cluster_mode", reason=PACKAGE_MANAGER_UNAVAILABLE)

        outcome = SequenceOutcome(basic=basic)
        added_repos: set[str] = set()

        for step in self.steps:
            reason = step.skip_reason(plan, capabilities)
            if reason is None and basic and step.optional:
                reason = PACKAGE_MANAGER_UNAVAILABLE
            if reason is not None:
                logger.info("step_skipped", step=step.name, reason=reason)
                self._record(outcome, StepResult(step.name, step.rank, StepStatus.SKIPPED, reason))
                continue

            logger.info("step_started", step=step.name, rank=step.rank)
            start = time.monotonic()
            payload: Payload | None = None
            try:
                payload = self.resolver.resolve(step, capabilities)
                if payload is None:
                    self._record(
                        outcome,
                        StepResult(
                            step.name,
                            step.rank,
                            StepStatus.SKIPPED,
                            reason="no payload available",
                            duration_seconds=time.monotonic() - start,
                        ),
                    )
                    continue

                message = await self._execute(step, payload, plan, added_repos)
                if step.wait:
                    await self._wait(step)
            except (BootstrapError, OSError) as exc:
                if isinstance(exc, BootstrapError):
                    e = exc
                else:
                    e = StepActionError(str(exc), data={"errno": exc.errno})
                if e.step is None:
                    e.step = step.name
                logger.error("step_failed", step=step.name, kind=e.kind, error=e.message)
                self._record(
                    outcome,
                    StepResult(
                        step.name,
                        step.rank,
                        StepStatus.FAILED,
                        payload_source=payload.source.value if payload else None,
                        error=e,
                        duration_seconds=time.monotonic() - start,
                    ),
                )
                outcome.error = e
                return outcome

            duration = time.monotonic() - start
            logger.info("step_succeeded", step=step.name, duration_seconds=round(duration, 2))
            self._record(
                outcome,
                StepResult(
                    step.name,
                    step.rank,
                    StepStatus.SUCCEEDED,
                    payload_source=payload.source.value,
                    message=message,
                    duration_seconds=duration,
                ),
            )

        return outcome

    def _record(self, outcome: SequenceOutcome, result: StepResult) -> None:
        outcome.results.append(result)
        if self.on_result:
            self.on_result(result)

    async def _execute(
        self,
        step: Step,
        payload: Payload,
        plan: BootstrapPlan,
        added_repos: set[str],
    ) -> str:
        """Dispatch a step's action to its collaborator.

        Raises:
            ClusterCreateError: From the provisioner.
            StepActionError: If kubectl or helm report failure.
        """
        if payload.action == ActionKind.CREATE_CLUSTER:
            return await self.provisioner.provision(plan)

        if payload.action == ActionKind.APPLY_MANIFEST:
            if payload.manifest_file:
                success, msg = self.kubectl.apply_file(payload.manifest_file)
            else:
                success, msg = self.kubectl.apply(payload.manifest or "")
            if not success:
                raise StepActionError(msg, step=step.name)
            return msg

        chart = step.chart
        if chart is None:
            raise StepActionError("package step has no chart", step=step.name)

        if chart.repo_name and chart.repo_url and chart.repo_name not in added_repos:
            success, msg = self.helm.add_repo(chart.repo_name, chart.repo_url)
            if success:
                success, msg = self.helm.update_repos(chart.repo_name)
            if not success:
                raise StepActionError(msg, step=step.name)
            added_repos.add(chart.repo_name)

        success, msg = self.helm.install(
            release=chart.release,
            chart=payload.chart or chart.chart,
            namespace=chart.namespace,
            values_file=payload.values_file,
            version=chart.version,
            set_values=chart.set_values,
        )
        if not success:
            raise StepActionError(msg, step=step.name)
        return msg

    async def _wait(self, step: Step) -> None:
        wait = step.wait
        logger.info(
            "readiness_wait",
            step=step.name,
            selector=wait.selector,
            namespace=wait.namespace,
            timeout_seconds=wait.timeout_seconds,
        )
        result = await self.poller.wait_for_ready(
            wait.selector, wait.namespace, wait.timeout_seconds
        )
        if not result.ready:
            raise ReadinessTimeoutError(
                result.error or "readiness wait timed out",
                step=step.name,
                data={
                    "selector": wait.selector,
                    "namespace": wait.namespace,
                    "timeout_seconds": wait.timeout_seconds,
                    "ready_pods": result.ready_pods,
                    "total_pods": result.total_pods,
                },
            )
