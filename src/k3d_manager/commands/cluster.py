"""Cluster commands.

This module provides the `dev`, `prod`, `list`, `delete` and `info`
commands. `prod` runs the full bootstrap pipeline; the others are thin
wrappers over k3d and kubectl.
"""

from __future__ import annotations

import asyncio
import json
import sys

import click

from ..bootstrap import (
    ConfigError,
    K3dClient,
    KubectlClient,
    resolve_plan,
    run_bootstrap,
)
from ..bootstrap.provisioner import ClusterProvisioner
from ..config import ManagerConfig
from ..formatters import (
    print_capabilities,
    print_clusters,
    print_plan,
    print_section,
    print_step_result,
    print_summary,
)


def _config(ctx: click.Context) -> ManagerConfig:
    return ctx.obj["config"]


@click.command()
@click.option("--name", "-n", default="dev-cluster", help="Cluster name")
@click.option("--workers", "-w", default=2, type=int, help="Number of worker nodes")
@click.pass_context
def dev(ctx: click.Context, name: str, workers: int) -> None:
    """Create a simple development cluster."""
    try:
        plan = resolve_plan(name, servers=1, agents=workers)
    except ConfigError as e:
        click.echo(f"✗ {e.message}", err=True)
        sys.exit(2)

    click.echo(f"🚀 Creating dev cluster: {plan.name}")
    click.echo(f"   Workers: {plan.agents}")

    provisioner = ClusterProvisioner(image=_config(ctx).k3s_image)
    success, msg = provisioner.provision_dev(plan.name, plan.agents)
    if not success:
        click.echo(f"✗ {msg}", err=True)
        sys.exit(1)

    click.echo(f"✓ Dev cluster '{plan.name}' created successfully!")
    click.echo("\n📋 Quick commands:")
    click.echo("   kubectl get nodes")
    click.echo(f"   kubectl config use-context {plan.context_name}")
    click.echo(f"   k3d cluster delete {plan.name}")


@click.command()
@click.option("--name", "-n", default="prod-cluster", help="Cluster name")
@click.option("--servers", "-s", default=3, type=int, help="Number of control plane nodes")
@click.option("--agents", "-w", default=3, type=int, help="Number of worker nodes")
@click.option("--skip-monitoring", is_flag=True, help="Skip monitoring stack installation")
@click.option("--skip-logging", is_flag=True, help="Skip logging stack installation")
@click.option("--skip-argocd", is_flag=True, help="Skip Argo CD installation")
@click.option("--values-dir", default=None, help="Directory of Helm values overlays")
@click.option("--manifests-dir", default=None, help="Directory of manifest overlays")
@click.option("--charts-dir", default=None, help="Directory of local charts")
@click.option(
    "--tolerate-failure",
    is_flag=True,
    help="Print the access summary even if a step failed",
)
@click.option("--json", "json_output", is_flag=True, help="Print the report as JSON")
@click.pass_context
def prod(
    ctx: click.Context,
    name: str,
    servers: int,
    agents: int,
    skip_monitoring: bool,
    skip_logging: bool,
    skip_argocd: bool,
    values_dir: str | None,
    manifests_dir: str | None,
    charts_dir: str | None,
    tolerate_failure: bool,
    json_output: bool,
) -> None:
    """Create a production-like cluster with the full component stack.

    Components whose Helm values, manifests or charts are found in the
    overlay directories use them; everything else uses built-in defaults.
    Without helm, only the cluster and namespace setup are provisioned.

    Examples:

        # Full stack
        k3d-manager prod

        # Smaller cluster without logging
        k3d-manager prod --servers 1 --agents 2 --skip-logging

        # Use local overlays
        k3d-manager prod --values-dir ./values --charts-dir ./charts
    """
    try:
        plan = resolve_plan(
            name,
            servers=servers,
            agents=agents,
            skip_monitoring=skip_monitoring,
            skip_logging=skip_logging,
            skip_delivery=skip_argocd,
        )
    except ConfigError as e:
        click.echo(f"✗ {e.message}", err=True)
        sys.exit(2)

    config = _config(ctx)
    config.override("values_dir", values_dir)
    config.override("manifests_dir", manifests_dir)
    config.override("charts_dir", charts_dir)

    if not json_output:
        print_plan(plan)
        click.echo("📦 Provisioning:")

    report = asyncio.run(
        run_bootstrap(
            plan,
            config=config,
            tolerate_failure=tolerate_failure,
            on_result=None if json_output else print_step_result,
        )
    )

    if json_output:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        click.echo()
        print_capabilities(report.capabilities.to_dict())
        if report.summary:
            print_summary(report.summary)

    if not report.succeeded:
        if not json_output:
            click.echo(f"✗ Provisioning stopped: {report.error}", err=True)
            click.echo(
                f"  The cluster is left as-is. Tear down with: k3d cluster delete {plan.name}",
                err=True,
            )
        sys.exit(1)


@click.command("list")
def list_clusters() -> None:
    """List all k3d clusters."""
    click.echo("📋 K3D Clusters:\n")
    print_clusters(K3dClient().list())


@click.command()
@click.argument("name")
def delete(name: str) -> None:
    """Delete a cluster."""
    click.echo(f"🗑️  Deleting cluster: {name}")
    success, msg = K3dClient().delete(name)
    if not success:
        click.echo(f"✗ {msg}", err=True)
        sys.exit(1)
    click.echo(f"✓ {msg}")


@click.command()
@click.argument("name")
def info(name: str) -> None:
    """Show nodes, pods and services of a cluster."""
    click.echo(f"ℹ️  Cluster Info: {name}")

    kubectl = KubectlClient()
    success, msg = kubectl.use_context(f"k3d-{name}")
    if not success:
        click.echo(f"✗ {msg}", err=True)
        sys.exit(1)

    print_section("📦 Nodes:", kubectl.get_table("nodes", wide=True))
    print_section("📊 All Pods:", kubectl.get_table("pods", all_namespaces=True))
    print_section("🌐 Services:", kubectl.get_table("svc", all_namespaces=True))
