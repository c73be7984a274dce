"""CLI main entry point."""

from pathlib import Path

import click

from .commands import delete, dev, info, list_clusters, prod
from .config import load_config
from .shared.logging import configure_logging


@click.group()
@click.option("-c", "--config", "config_path", type=click.Path(), help="Config file path")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="warning",
    help="Log level for structured logs",
)
@click.option("--json-logs", is_flag=True, help="Emit structured logs as JSON")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    help="Also append structured logs to this file as JSON lines",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    log_level: str,
    json_logs: bool,
    log_file: str | None,
) -> None:
    """Manage multiple k3d clusters."""
    configure_logging(level=log_level, log_file=log_file, json_output=json_logs)
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(Path(config_path) if config_path else None)


cli.add_command(dev)
cli.add_command(prod)
cli.add_command(list_clusters)
cli.add_command(delete)
cli.add_command(info)


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
