"""Helm wrapper for chart repositories and release installs."""

from __future__ import annotations

import subprocess
from pathlib import Path


class HelmClient:
    """Install charts using helm."""

    def __init__(self, kubeconfig: str | None = None, kube_context: str | None = None):
        """Initialize client.

        Args:
            kubeconfig: Path to kubeconfig file.
            kube_context: kubeconfig context to target.
        """
        self.kubeconfig = kubeconfig
        self.kube_context = kube_context

    def _helm_cmd(self) -> list[str]:
        cmd = ["helm"]
        if self.kubeconfig:
            cmd.extend(["--kubeconfig", self.kubeconfig])
        if self.kube_context:
            cmd.extend(["--kube-context", self.kube_context])
        return cmd

    def _run(self, args: list[str], timeout: float | None = None) -> tuple[bool, str]:
        try:
            result = subprocess.run(
                self._helm_cmd() + args,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
            if result.returncode != 0:
                return False, result.stderr.strip() or f"helm exited with {result.returncode}"
            return True, result.stdout.strip()
        except FileNotFoundError:
            return False, "helm not found. Is helm installed?"
        except subprocess.TimeoutExpired:
            return False, "helm not responding (timeout)"
        except OSError as e:
            return False, str(e)

    def version(self) -> tuple[bool, str]:
        """Return the client version string."""
        return self._run(["version", "--short"], timeout=10)

    def add_repo(self, name: str, url: str) -> tuple[bool, str]:
        """Add (or refresh) a chart repository.

        Args:
            name: Local repo alias.
            url: Repository URL.

        Returns:
            Tuple of (success, message).
        """
        success, msg = self._run(["repo", "add", name, url, "--force-update"])
        if not success:
            return False, f"Failed to add repo '{name}': {msg}"
        return True, f"Repo '{name}' added"

    def update_repos(self, *names: str) -> tuple[bool, str]:
        """Refresh the local chart index for the named repos (all if none)."""
        success, msg = self._run(["repo", "update", *names])
        if not success:
            return False, f"Failed to update repos: {msg}"
        return True, "Repos updated"

    def install(
        self,
        release: str,
        chart: str,
        namespace: str,
        values_file: Path | None = None,
        version: str | None = None,
        set_values: dict[str, str] | None = None,
    ) -> tuple[bool, str]:
        """Install or upgrade a release.

        Args:
            release: Release name.
            chart: Chart reference ("repo/chart") or local chart directory.
            namespace: Target namespace (created if missing).
            values_file: Optional values overlay.
            version: Optional chart version.
            set_values: Extra --set overrides.

        Returns:
            Tuple of (success, message).
        """
        args = [
            "upgrade",
            "--install",
            release,
            chart,
            "--namespace",
            namespace,
            "--create-namespace",
        ]
        if version:
            args.extend(["--version", version])
        if values_file:
            args.extend(["-f", str(values_file)])
        for key, value in (set_values or {}).items():
            args.extend(["--set", f"{key}={value}"])

        success, msg = self._run(args)
        if not success:
            return False, f"Failed to install {release}: {msg}"
        return True, f"Release '{release}' installed in '{namespace}'"
