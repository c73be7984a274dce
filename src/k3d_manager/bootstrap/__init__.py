"""Bootstrap package for provisioning a local k3d cluster.

This package provides the engine behind `k3d-manager prod`, which:
1. Resolves an immutable plan from caller input
2. Probes optional tools and overlay files
3. Creates the cluster from a rendered k3d config
4. Runs the component pipeline in rank order with readiness waits
5. Summarizes what was installed and how to reach it
"""

from .capabilities import CapabilityProber, CapabilitySet, OverlayLayout
from .cluster import ClusterSummary, K3dClient
from .errors import (
    BootstrapError,
    ClusterCreateError,
    ConfigError,
    FallbackExhausted,
    ProbeInconclusive,
    ReadinessTimeoutError,
    StepActionError,
)
from .fallback import FallbackResolver, Payload, PayloadSource
from .helm import HelmClient
from .kubectl import KubectlClient
from .orchestrator import BootstrapReport, run_bootstrap
from .plan import BootstrapPlan, resolve_plan
from .provisioner import ClusterProvisioner
from .readiness import ReadinessPoller, ReadinessResult
from .reporter import PostProvisionReporter, ProvisionSummary
from .sequencer import SequenceOutcome, StepResult, StepSequencer, StepStatus
from .steps import ActionKind, ChartSpec, ReadinessWait, Step, default_pipeline

__all__ = [
    # Plan
    "BootstrapPlan",
    "resolve_plan",
    # Capabilities
    "CapabilityProber",
    "CapabilitySet",
    "OverlayLayout",
    # Collaborators
    "K3dClient",
    "ClusterSummary",
    "KubectlClient",
    "HelmClient",
    # Pipeline
    "ActionKind",
    "ChartSpec",
    "ReadinessWait",
    "Step",
    "default_pipeline",
    "FallbackResolver",
    "Payload",
    "PayloadSource",
    "ClusterProvisioner",
    "ReadinessPoller",
    "ReadinessResult",
    "StepSequencer",
    "StepResult",
    "StepStatus",
    "SequenceOutcome",
    # Reporting
    "PostProvisionReporter",
    "ProvisionSummary",
    "BootstrapReport",
    "run_bootstrap",
    # Errors
    "BootstrapError",
    "ConfigError",
    "ProbeInconclusive",
    "ClusterCreateError",
    "StepActionError",
    "ReadinessTimeoutError",
    "FallbackExhausted",
]
