"""Installation commands"""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from c8deploy.config.manager import resolve_host
from c8deploy.installer import COMPENSATIONS, Host, Step, full_install
from c8deploy.installer.steps import STEP_DESCRIPTIONS
from c8deploy.logs import setup_logging
from c8deploy.runner import CommandRunner

console = Console()


@click.command()
@click.option("--host", "host_address", help="Host address written into .env (default: detected)")
@click.option("--camunda-version", help="Camunda docker-compose bundle version")
@click.option("--dry-run", is_flag=True, help="Show the plan and prerequisites without executing")
@click.pass_context
def install(ctx, host_address, camunda_version, dry_run):
    """Install Docker and start the Camunda 8 stack"""
    cfg = ctx.obj["config"]
    if host_address:
        cfg["host"]["address"] = host_address
    if camunda_version:
        cfg["camunda"]["version"] = camunda_version

    runner = CommandRunner(timeout=cfg["install"].get("command_timeout"))
    host = Host(runner=runner, config=cfg, address=resolve_host(cfg))

    if dry_run:
        console.print("[bold cyan]Dry run mode - nothing will be executed[/bold cyan]\n")
        show_plan(host)
        return

    _, log_file = setup_logging(Path(cfg["logging"]["dir"]), "servicelog", cfg["logging"]["level"])
    console.print(f"[bold]Starting Camunda {host.version} installation for host {host.address}[/bold]")
    console.print(f"[dim]Log file: {log_file}[/dim]\n")

    result = full_install(host)

    if result.ok:
        console.print("\n[green]✓ Installation complete![/green]")
    else:
        console.print(f"\n[red]✗ Installation failed at: {result.failed_step}[/red]")
        if result.unwound:
            console.print(f"Rolled back: {', '.join(str(step) for step in result.unwound)}")
        console.print(f"See {log_file} for details.")
    sys.exit(result.exit_code)


@click.command()
def steps():
    """List installation steps and their rollback actions"""
    console.print(steps_table())


def steps_table() -> Table:
    table = Table(title="Installation Steps", show_header=True)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Step", style="blue")
    table.add_column("Description")
    table.add_column("Rollback")

    for index, step in enumerate(Step):
        compensation = COMPENSATIONS[step]
        rollback = compensation.description
        if not compensation.reversible:
            rollback = f"[yellow]cannot undo[/yellow]: {rollback}"
        table.add_row(str(index), step.value, STEP_DESCRIPTIONS[step], rollback)

    return table


def show_plan(host: Host) -> None:
    """Print the plan and which required tools are already present"""
    console.print(steps_table())

    tools = Table(title="Prerequisites", show_header=True)
    tools.add_column("Tool", style="cyan")
    tools.add_column("Status")
    for tool in list(host.config["install"]["required_tools"]) + ["docker"]:
        if host.runner.which(tool):
            tools.add_row(tool, "[green]✓ Found[/green]")
        else:
            tools.add_row(tool, "[yellow]✗ Will be installed[/yellow]")
    console.print(tools)

    console.print(f"\n[bold]Host address:[/bold] {host.address}")
    console.print(f"[bold]Bundle:[/bold] {host.bundle_url}")
    console.print(f"[bold]Compose directory:[/bold] {host.compose_dir}")
