"""Health check command"""

import sys
from pathlib import Path

import click
from rich.console import Console

from c8deploy.config.manager import resolve_host
from c8deploy.health.render import print_report
from c8deploy.health.reporter import HealthReporter
from c8deploy.logs import setup_logging
from c8deploy.runner import CommandRunner

console = Console()


@click.command()
@click.argument("host_address", required=False)
@click.option("--tail", type=click.IntRange(min=1), help="Log lines to collect per service")
@click.option("--no-probe", is_flag=True, help="Skip HTTP endpoint probes")
@click.pass_context
def health(ctx, host_address, tail, no_probe):
    """Check container health of the Camunda stack"""
    cfg = ctx.obj["config"]
    if tail:
        cfg["health"]["log_tail"] = tail
    if no_probe:
        cfg["health"]["probe_endpoints"] = False

    _, log_file = setup_logging(Path(cfg["logging"]["dir"]), "health", cfg["logging"]["level"])

    address = host_address or resolve_host(cfg)
    reporter = HealthReporter.from_config(CommandRunner(), cfg, address)
    report = reporter.run()

    print_report(report, console)
    console.print(f"[dim]Log file: {log_file}[/dim]")
    sys.exit(report.exit_code)
