"""Error taxonomy for the bootstrap orchestrator.

Every failure the pipeline can produce maps to one of these classes. The
sequencer captures them in StepResults rather than letting them escape,
so callers always see how far provisioning got.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class BootstrapError(Exception):
    """Base error class for bootstrap errors."""

    message: str
    step: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    kind = "bootstrap_error"

    def __str__(self) -> str:
        if self.step:
            return f"[{self.step}] {self.message}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable error object."""
        error: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.step:
            error["step"] = self.step
        if self.data:
            error["data"] = self.data
        return error


@dataclass
class ConfigError(BootstrapError):
    """Invalid plan input. Raised before any side effect."""

    kind = "config_error"


@dataclass
class ProbeInconclusive(BootstrapError):
    """A capability probe could not decide. Always resolved to unavailable."""

    kind = "probe_inconclusive"


@dataclass
class ClusterCreateError(BootstrapError):
    """The cluster-lifecycle tool failed to create the cluster."""

    kind = "cluster_create_error"


@dataclass
class StepActionError(BootstrapError):
    """A manifest apply or package install failed."""

    kind = "step_action_error"


@dataclass
class ReadinessTimeoutError(BootstrapError):
    """A readiness wait exceeded its bound."""

    kind = "readiness_timeout"


@dataclass
class FallbackExhausted(BootstrapError):
    """No external or default payload exists for a step that cannot be skipped."""

    kind = "fallback_exhausted"
