"""CLI output formatting helpers.

All formatters take values produced by the bootstrap package and print
with click.echo; none of them affect control flow.
"""

from typing import Any

import click

from .bootstrap.cluster import ClusterSummary
from .bootstrap.plan import FEATURE_FLAGS, BootstrapPlan
from .bootstrap.reporter import ProvisionSummary
from .bootstrap.sequencer import StepResult, StepStatus

STATUS_MARKS = {
    StepStatus.SUCCEEDED: "✓",
    StepStatus.SKIPPED: "-",
    StepStatus.FAILED: "✗",
}

SEPARATOR = "=" * 60


def print_plan(plan: BootstrapPlan) -> None:
    """Print the plan banner.

    Args:
        plan: Resolved plan
    """
    click.echo(f"\n🚀 Building production-like k3d cluster: {plan.name}")
    click.echo("📋 Configuration:")
    click.echo(f"   Control Plane Nodes: {plan.servers}")
    click.echo(f"   Worker Nodes: {plan.agents}")
    for flag in FEATURE_FLAGS:
        mark = "✓" if plan.enabled(flag) else "✗"
        click.echo(f"   {flag}: {mark}")
    click.echo()


def print_capabilities(capabilities: dict[str, bool]) -> None:
    """Print binary and overlay-directory probe results.

    Args:
        capabilities: CapabilitySet.to_dict() output
    """
    click.echo("🔎 Capabilities:")
    for name, available in capabilities.items():
        if ":" in name and not available:
            continue  # Absent per-step overlays are the normal case
        click.echo(f"   {'✓' if available else '✗'} {name}")
    click.echo()


def print_step_result(result: StepResult) -> None:
    """Print one line for a finished step.

    Args:
        result: Step result
    """
    mark = STATUS_MARKS[result.status]
    line = f"  {mark} [{result.rank:>2}] {result.name}"
    if result.status == StepStatus.SKIPPED and result.reason:
        line += f" (skipped: {result.reason})"
    elif result.status == StepStatus.SUCCEEDED:
        source = f", {result.payload_source}" if result.payload_source else ""
        line += f" ({result.duration_seconds:.1f}s{source})"
    elif result.error:
        line += f": {result.error.message}"
    click.echo(line, err=result.status == StepStatus.FAILED)


def print_summary(summary: ProvisionSummary) -> None:
    """Print access information.

    Args:
        summary: Post-provision summary
    """
    click.echo(f"\n{SEPARATOR}")
    if summary.variant == "basic":
        click.echo(f"🎯 Basic cluster '{summary.cluster}' is ready")
    else:
        click.echo(f"🎯 Access Information for '{summary.cluster}':")
    click.echo(SEPARATOR)

    if summary.endpoints:
        click.echo("\n🌐 Endpoints:")
        for endpoint in summary.endpoints:
            creds = f" ({endpoint.credentials})" if endpoint.credentials else ""
            click.echo(f"  {endpoint.name + ':':<12} {endpoint.url}{creds}")

    if summary.credentials:
        click.echo("\n🔑 Credentials:")
        for line in summary.credentials:
            click.echo(f"  {line}")

    if summary.notes:
        click.echo("\n📝 Notes:")
        for note in summary.notes:
            click.echo(f"  {note}")

    click.echo("\n🔍 Useful Commands:")
    for command in summary.commands:
        click.echo(f"  {command}")
    click.echo(f"\n{SEPARATOR}\n")


def print_clusters(clusters: list[ClusterSummary]) -> None:
    """Print a cluster table.

    Args:
        clusters: Clusters from K3dClient.list()
    """
    if not clusters:
        click.echo("No k3d clusters found.")
        return

    click.echo(f"{'NAME':<24} {'SERVERS':<10} {'AGENTS':<10}")
    for c in clusters:
        click.echo(
            f"{c.name:<24} "
            f"{f'{c.servers_running}/{c.servers_count}':<10} "
            f"{f'{c.agents_running}/{c.agents_count}':<10}"
        )


def print_section(title: str, body: Any) -> None:
    """Print a titled block of preformatted output."""
    click.echo(f"\n{title}")
    click.echo(body)
