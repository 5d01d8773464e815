#!/usr/bin/env python3
"""c8deploy CLI - Main entry point"""

from pathlib import Path

import click
from rich.console import Console

from c8deploy.config.manager import DEFAULT_CONFIG_PATH, ConfigManager
from c8deploy.errors import ConfigError

console = Console()


@click.group()
@click.option("--config", type=click.Path(), help="Config file path")
@click.option("--log-dir", type=click.Path(), help="Directory for run log files")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx, config, log_dir, verbose):
    """c8deploy - Camunda 8 docker-compose installer and health reporter"""
    ctx.ensure_object(dict)

    # Load configuration
    config_path = Path(config) if config else DEFAULT_CONFIG_PATH
    try:
        cfg = ConfigManager(config_path).load()
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.Abort()

    # Override with command-line options
    if log_dir:
        cfg["logging"]["dir"] = log_dir
    if verbose:
        cfg["logging"]["level"] = "debug"

    ctx.obj["config"] = cfg
    ctx.obj["verbose"] = verbose


@cli.command()
def version():
    """Show version information"""
    from c8deploy import __version__

    console.print(f"c8deploy version {__version__}")


# Import subcommands
from c8deploy.cli import health, install  # noqa: E402

cli.add_command(install.install)
cli.add_command(install.steps)
cli.add_command(health.health)


if __name__ == "__main__":
    cli()
