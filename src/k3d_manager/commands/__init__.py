"""Command implementations for k3d-manager."""

from .cluster import delete, dev, info, list_clusters, prod

__all__ = ["dev", "prod", "list_clusters", "delete", "info"]
