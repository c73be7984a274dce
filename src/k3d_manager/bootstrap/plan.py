"""Bootstrap plan resolution.

Turns raw caller parameters into the immutable BootstrapPlan that every
later stage reads. No side effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import ConfigError

# Feature flag names
INSTALL_MONITORING = "install-monitoring"
INSTALL_LOGGING = "install-logging"
INSTALL_DELIVERY = "install-delivery-controller"

FEATURE_FLAGS = (INSTALL_MONITORING, INSTALL_LOGGING, INSTALL_DELIVERY)

# Node counts must fit k3d's small-cluster model
MAX_NODES = 9
MIN_SERVERS = 1
MIN_AGENTS = 0


@dataclass(frozen=True)
class BootstrapPlan:
    """Cluster topology plus feature flags for one run."""

    name: str
    servers: int
    agents: int
    features: frozenset[str] = field(default_factory=frozenset)

    def enabled(self, flag: str) -> bool:
        return flag in self.features

    @property
    def context_name(self) -> str:
        """kubeconfig context k3d creates for this cluster."""
        return f"k3d-{self.name}"

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "servers": self.servers,
            "agents": self.agents,
            "features": {flag: self.enabled(flag) for flag in FEATURE_FLAGS},
        }


def _check_count(label: str, value: object, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{label} must be an integer, got {value!r}", data={label: value})
    if not minimum <= value <= MAX_NODES:
        raise ConfigError(
            f"{label} must be between {minimum} and {MAX_NODES}, got {value}",
            data={label: value},
        )
    return value


def resolve_plan(
    name: str,
    servers: int = 3,
    agents: int = 3,
    skip_monitoring: bool = False,
    skip_logging: bool = False,
    skip_delivery: bool = False,
) -> BootstrapPlan:
    """Build a BootstrapPlan from caller input.

    Args:
        name: Cluster name.
        servers: Control-plane node count.
        agents: Worker node count.
        skip_monitoring: Leave out Prometheus + Grafana.
        skip_logging: Leave out the EFK stack.
        skip_delivery: Leave out the continuous-delivery controller (Argo CD).

    Returns:
        The immutable plan.

    Raises:
        ConfigError: If the name is empty or a node count is out of range.
    """
    if not name or not name.strip():
        raise ConfigError("cluster name must not be empty")

    features = set()
    if not skip_monitoring:
        features.add(INSTALL_MONITORING)
    if not skip_logging:
        features.add(INSTALL_LOGGING)
    if not skip_delivery:
        features.add(INSTALL_DELIVERY)

    return BootstrapPlan(
        name=name.strip(),
        servers=_check_count("servers", servers, MIN_SERVERS),
        agents=_check_count("agents", agents, MIN_AGENTS),
        features=frozenset(features),
    )
