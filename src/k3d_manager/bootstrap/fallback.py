"""Payload resolution for pipeline steps.

For each step, choose between an external overlay the caller provided
(values file, manifest file, local chart directory) and the built-in
default. Resolution order:

1. external payload, when its capability says it exists
2. built-in default (inline manifest, generated values file, --set flags)
3. skip, if the step is skippable; otherwise FallbackExhausted
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import yaml

from ..shared.logging import get_logger
from ..shared.paths import get_default_values_file
from .capabilities import (
    CapabilitySet,
    OverlayLayout,
    chart_capability,
    manifest_capability,
    values_capability,
)
from .errors import FallbackExhausted, StepActionError
from .steps import ActionKind, Step

logger = get_logger(__name__)


class PayloadSource(Enum):
    """Where a step's payload came from."""

    EXTERNAL = "external"
    DEFAULT = "default"
    FLAGS = "flags"  # chart defaults plus --set overrides only


@dataclass(frozen=True)
class Payload:
    """Resolved input for one step's action."""

    source: PayloadSource
    action: ActionKind
    manifest: str | None = None
    manifest_file: Path | None = None
    values_file: Path | None = None
    chart: str | None = None

    def describe(self) -> str:
        if self.manifest_file:
            return f"{self.source.value} manifest {self.manifest_file}"
        if self.action == ActionKind.INSTALL_PACKAGE:
            detail = f"chart {self.chart}"
            if self.values_file:
                detail += f" with values {self.values_file}"
            return f"{self.source.value} {detail}"
        return f"{self.source.value} {self.action.value}"


class FallbackResolver:
    """Choose external or default payloads per step."""

    def __init__(self, layout: OverlayLayout | None = None, scratch_dir: Path | None = None):
        """Initialize resolver.

        Args:
            layout: Overlay locations (must match the prober's layout).
            scratch_dir: Where generated default values files are written.
        """
        self.layout = layout or OverlayLayout()
        self.scratch_dir = scratch_dir

    def resolve(self, step: Step, capabilities: CapabilitySet) -> Payload | None:
        """Resolve the payload for a step.

        Args:
            step: Step to resolve.
            capabilities: Probe result for this run.

        Returns:
            The payload, or None if the step should be skipped.

        Raises:
            FallbackExhausted: If nothing usable exists and the step is not skippable.
        """
        if step.action == ActionKind.CREATE_CLUSTER:
            return Payload(source=PayloadSource.DEFAULT, action=ActionKind.CREATE_CLUSTER)

        if (
            step.chart_overlay
            and capabilities.package_manager
            and capabilities.has(chart_capability(step.name))
        ):
            payload = Payload(
                source=PayloadSource.EXTERNAL,
                action=ActionKind.INSTALL_PACKAGE,
                chart=str(self.layout.chart_dir(step.name)),
                values_file=self._external_values(step, capabilities),
            )
        elif step.action == ActionKind.INSTALL_PACKAGE:
            payload = self._resolve_package(step, capabilities)
        else:
            payload = self._resolve_manifest(step, capabilities)

        if payload is None:
            logger.info("step_payload_missing", step=step.name, skippable=step.skippable)
        else:
            logger.debug("step_payload", step=step.name, payload=payload.describe())
        return payload

    def _external_values(self, step: Step, capabilities: CapabilitySet) -> Path | None:
        if step.values_overlay and capabilities.has(values_capability(step.name)):
            return self.layout.values_file(step.name)
        return None

    def _resolve_package(self, step: Step, capabilities: CapabilitySet) -> Payload | None:
        if not capabilities.package_manager or step.chart is None:
            return self._exhausted(step, "package manager unavailable")

        external = self._external_values(step, capabilities)
        if external:
            return Payload(
                source=PayloadSource.EXTERNAL,
                action=ActionKind.INSTALL_PACKAGE,
                chart=step.chart.chart,
                values_file=external,
            )
        if step.default_values:
            return Payload(
                source=PayloadSource.DEFAULT,
                action=ActionKind.INSTALL_PACKAGE,
                chart=step.chart.chart,
                values_file=self._write_default_values(step),
            )
        return Payload(
            source=PayloadSource.FLAGS,
            action=ActionKind.INSTALL_PACKAGE,
            chart=step.chart.chart,
        )

    def _resolve_manifest(self, step: Step, capabilities: CapabilitySet) -> Payload | None:
        if step.manifest_overlay and capabilities.has(manifest_capability(step.name)):
            return Payload(
                source=PayloadSource.EXTERNAL,
                action=ActionKind.APPLY_MANIFEST,
                manifest_file=self.layout.manifest_file(step.name),
            )
        if step.manifest:
            return Payload(
                source=PayloadSource.DEFAULT,
                action=ActionKind.APPLY_MANIFEST,
                manifest=step.manifest(),
            )
        return self._exhausted(step, "no manifest overlay or built-in manifest")

    def _exhausted(self, step: Step, reason: str) -> None:
        if step.skippable:
            return None
        raise FallbackExhausted(f"no payload available: {reason}", step=step.name)

    def _write_default_values(self, step: Step) -> Path:
        """Write the built-in values for a step to scratch.

        Raises:
            StepActionError: If the scratch directory is not writable.
        """
        path = get_default_values_file(step.name, self.scratch_dir)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                yaml.dump(step.default_values(), f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise StepActionError(
                f"cannot write default values to {path}: {e}",
                step=step.name,
                data={"path": str(path)},
            ) from e
        return path
