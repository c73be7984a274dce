"""Shared modules for k3d-manager.

This module provides functionality used by every command:
- Logging (structlog configuration)
- Paths (~/.k3d-manager layout)
"""

from .logging import configure_logging, get_logger
from .paths import (
    CONFIG_FILE,
    MANAGER_DIR,
    SCRATCH_DIR,
    ensure_dirs,
    get_default_values_file,
    get_topology_file,
)

__all__ = [
    # Paths
    "MANAGER_DIR",
    "CONFIG_FILE",
    "SCRATCH_DIR",
    "ensure_dirs",
    "get_topology_file",
    "get_default_values_file",
    # Logging
    "configure_logging",
    "get_logger",
]
