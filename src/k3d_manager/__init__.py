"""k3d-manager - Provision local k3d clusters with a production-like stack."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("k3d-manager")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"  # Fallback for editable installs without metadata

from .main import main

__all__ = ["main", "__version__"]
