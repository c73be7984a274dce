"""kubectl wrapper for applying manifests and reading cluster state."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any


class KubectlClient:
    """Apply manifests and query resources using kubectl."""

    def __init__(self, kubeconfig: str | None = None, context: str | None = None):
        """Initialize client.

        Args:
            kubeconfig: Path to kubeconfig file.
            context: kubeconfig context to target (default: current context).
        """
        self.kubeconfig = kubeconfig
        self.context = context

    def _kubectl_cmd(self) -> list[str]:
        """Build base kubectl command."""
        cmd = ["kubectl"]
        if self.kubeconfig:
            cmd.extend(["--kubeconfig", self.kubeconfig])
        if self.context:
            cmd.extend(["--context", self.context])
        return cmd

    def apply(self, manifest: str) -> tuple[bool, str]:
        """Apply manifest text via stdin.

        Args:
            manifest: One or more YAML documents.

        Returns:
            Tuple of (success, message).
        """
        try:
            result = subprocess.run(
                self._kubectl_cmd() + ["apply", "-f", "-"],
                input=manifest,
                capture_output=True,
                text=True,
            )
            if result.returncode != 0:
                return False, f"kubectl apply failed: {result.stderr.strip()}"
            return True, result.stdout.strip() or "Manifest applied"
        except FileNotFoundError:
            return False, "kubectl not found. Is kubectl installed?"
        except OSError as e:
            return False, str(e)

    def apply_file(self, path: Path) -> tuple[bool, str]:
        """Apply a manifest file.

        Args:
            path: YAML file to apply.

        Returns:
            Tuple of (success, message).
        """
        try:
            result = subprocess.run(
                self._kubectl_cmd() + ["apply", "-f", str(path)],
                capture_output=True,
                text=True,
            )
            if result.returncode != 0:
                return False, f"Failed to apply {path.name}: {result.stderr.strip()}"
            return True, result.stdout.strip() or f"Applied {path.name}"
        except FileNotFoundError:
            return False, "kubectl not found. Is kubectl installed?"
        except OSError as e:
            return False, str(e)

    def get(
        self,
        kind: str,
        namespace: str | None = None,
        selector: str | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Get resources as parsed JSON.

        Args:
            kind: Resource kind (e.g. "pods", "nodes").
            namespace: Namespace, or None for cluster-scoped/current.
            selector: Optional label selector.
            timeout: Seconds before the call is abandoned.

        Returns:
            Parsed `kubectl get -o json` output, or {} on any failure or timeout.
        """
        cmd = self._kubectl_cmd() + ["get", kind]
        if namespace:
            cmd.extend(["-n", namespace])
        if selector:
            cmd.extend(["-l", selector])
        cmd.extend(["-o", "json"])

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        except (subprocess.TimeoutExpired, OSError):
            return {}
        if result.returncode != 0:
            return {}
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError:
            return {}

    def pods_ready(
        self, selector: str, namespace: str, timeout: float | None = None
    ) -> tuple[int, int]:
        """Count ready pods matching a selector.

        Args:
            selector: Label selector.
            namespace: Namespace.
            timeout: Seconds before the underlying `kubectl get` is abandoned.

        Returns:
            Tuple of (ready_pods, total_pods).
        """
        pods = self.get(
            "pods", namespace=namespace, selector=selector, timeout=timeout
        ).get("items", [])
        ready = 0
        for pod in pods:
            conditions = pod.get("status", {}).get("conditions", [])
            if any(c.get("type") == "Ready" and c.get("status") == "True" for c in conditions):
                ready += 1
        return ready, len(pods)

    def use_context(self, context: str) -> tuple[bool, str]:
        """Switch the current kubeconfig context.

        Args:
            context: Context name (k3d uses "k3d-<cluster>").

        Returns:
            Tuple of (success, message).
        """
        try:
            result = subprocess.run(
                self._kubectl_cmd() + ["config", "use-context", context],
                capture_output=True,
                text=True,
            )
            if result.returncode != 0:
                return False, f"Failed to switch context: {result.stderr.strip()}"
            return True, f"Switched to context '{context}'"
        except FileNotFoundError:
            return False, "kubectl not found"
        except OSError as e:
            return False, str(e)

    def get_table(self, kind: str, all_namespaces: bool = False, wide: bool = False) -> str:
        """Get the human-readable table for a resource kind.

        Args:
            kind: Resource kind.
            all_namespaces: Add -A.
            wide: Add -o wide.

        Returns:
            kubectl's table output, or its error text.
        """
        cmd = self._kubectl_cmd() + ["get", kind]
        if all_namespaces:
            cmd.append("-A")
        if wide:
            cmd.extend(["-o", "wide"])
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            return str(e)
        if result.returncode != 0:
            return result.stderr.strip()
        return result.stdout.rstrip()
