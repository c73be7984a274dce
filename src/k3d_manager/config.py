"""Manager configuration.

Handles persistent configuration stored in ~/.k3d-manager/config.yaml.
Supports environment variable overrides and CLI flag precedence.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .shared.paths import (
    CONFIG_FILE,
    DEFAULT_CHARTS_DIR,
    DEFAULT_MANIFESTS_DIR,
    DEFAULT_VALUES_DIR,
    SCRATCH_DIR,
)

# Default values
DEFAULT_SETTLE_SECONDS = 10.0
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_K3S_IMAGE = "rancher/k3s:v1.28.5-k3s1"

# Environment variable mappings
ENV_VARS = {
    "values_dir": "K3D_MANAGER_VALUES_DIR",
    "manifests_dir": "K3D_MANAGER_MANIFESTS_DIR",
    "charts_dir": "K3D_MANAGER_CHARTS_DIR",
    "scratch_dir": "K3D_MANAGER_SCRATCH_DIR",
    "settle_seconds": "K3D_MANAGER_SETTLE_SECONDS",
    "poll_interval": "K3D_MANAGER_POLL_INTERVAL",
    "k3s_image": "K3D_MANAGER_K3S_IMAGE",
}

_PATH_KEYS = ("values_dir", "manifests_dir", "charts_dir", "scratch_dir")
_FLOAT_KEYS = ("settle_seconds", "poll_interval")


@dataclass
class ManagerConfig:
    """k3d-manager configuration."""

    values_dir: Path = DEFAULT_VALUES_DIR
    manifests_dir: Path = DEFAULT_MANIFESTS_DIR
    charts_dir: Path = DEFAULT_CHARTS_DIR
    scratch_dir: Path = SCRATCH_DIR
    settle_seconds: float = DEFAULT_SETTLE_SECONDS
    poll_interval: float = DEFAULT_POLL_INTERVAL
    k3s_image: str = DEFAULT_K3S_IMAGE

    # Track where each value came from
    _sources: dict[str, str] = field(default_factory=dict)

    def get_source(self, key: str) -> str:
        """Get the source of a config value."""
        return self._sources.get(key, "default")

    def override(self, key: str, value: Any) -> None:
        """Apply a CLI flag value. None means the flag was not given."""
        if value is None:
            return
        setattr(self, key, _coerce(key, value))
        self._sources[key] = "flag"


def _coerce(key: str, value: Any) -> Any:
    if key in _PATH_KEYS:
        return Path(value).expanduser()
    if key in _FLOAT_KEYS:
        number = float(value)
        # A zero settle skips the delay; a zero poll interval would spin
        if not number >= 0 or (key == "poll_interval" and number == 0):
            raise ValueError(f"{key} out of range: {value!r}")
        return number
    return str(value)


def get_config_path() -> Path:
    """Get the config file path.

    Returns:
        Path to ~/.k3d-manager/config.yaml
    """
    return CONFIG_FILE


def load_config(config_path: Path | None = None) -> ManagerConfig:
    """Load configuration.

    Precedence (highest to lowest):
    1. Environment variables
    2. Config file (~/.k3d-manager/config.yaml)
    3. Defaults

    CLI flags are applied on top by the caller via ManagerConfig.override().

    Args:
        config_path: Alternate config file (default: ~/.k3d-manager/config.yaml)

    Returns:
        ManagerConfig with values and sources
    """
    config = ManagerConfig()
    sources: dict[str, str] = {key: "default" for key in ENV_VARS}

    path = config_path or get_config_path()
    if path.exists():
        try:
            with open(path) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            file_config = {}  # Unreadable config file, use defaults
        if not isinstance(file_config, dict):
            file_config = {}

        for key in ENV_VARS:
            if key not in file_config:
                continue
            try:
                setattr(config, key, _coerce(key, file_config[key]))
                sources[key] = "config file"
            except (TypeError, ValueError):
                pass

    for key, env_var in ENV_VARS.items():
        raw = os.environ.get(env_var)
        if not raw:
            continue
        try:
            setattr(config, key, _coerce(key, raw))
            sources[key] = "environment"
        except ValueError:
            pass

    config._sources = sources
    return config
