"""Path management for k3d-manager.

Manages the ~/.k3d-manager/ directory structure.
"""

from pathlib import Path

# Base directory for all k3d-manager data
MANAGER_DIR = Path.home() / ".k3d-manager"

# Config file read by config.load_config()
CONFIG_FILE = MANAGER_DIR / "config.yaml"

# Write-once scratch output (rendered topology, generated default values)
SCRATCH_DIR = MANAGER_DIR / "scratch"

# Overlay locations, relative to the working directory
DEFAULT_VALUES_DIR = Path("values")
DEFAULT_MANIFESTS_DIR = Path("manifests")
DEFAULT_CHARTS_DIR = Path("charts")


def ensure_dirs(scratch_dir: Path | None = None) -> Path:
    """Create the scratch directory structure if missing.

    Creates:
    - <scratch>/ (mode 0o700 - user-only access)
    - <scratch>/values/

    Args:
        scratch_dir: Scratch directory (default: ~/.k3d-manager/scratch)

    Returns:
        The scratch directory.
    """
    scratch = scratch_dir or SCRATCH_DIR
    scratch.mkdir(mode=0o700, parents=True, exist_ok=True)
    (scratch / "values").mkdir(mode=0o700, exist_ok=True)
    return scratch


def get_topology_file(cluster_name: str, scratch_dir: Path | None = None) -> Path:
    """Get path to the rendered k3d topology config for a cluster.

    Args:
        cluster_name: Cluster name

    Returns:
        Path to the topology file
    """
    return (scratch_dir or SCRATCH_DIR) / f"k3d-{cluster_name}.yaml"


def get_default_values_file(step_name: str, scratch_dir: Path | None = None) -> Path:
    """Get path to a generated default Helm values file.

    Args:
        step_name: Step the values belong to (e.g., "monitoring")

    Returns:
        Path to the values file
    """
    return (scratch_dir or SCRATCH_DIR) / "values" / f"{step_name}.yaml"
