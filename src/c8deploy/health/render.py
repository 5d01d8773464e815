"""Terminal rendering of health reports."""

from rich.console import Console
from rich.table import Table

from .models import HealthReport, ServiceStatus

STATUS_STYLES = {
    ServiceStatus.NOT_FOUND: "red",
    ServiceStatus.STOPPED: "red",
    ServiceStatus.DEGRADED: "yellow",
    ServiceStatus.OK: "green",
    ServiceStatus.OK_UNMONITORED: "cyan",
}


def health_table(report: HealthReport, title: str = "Camunda 8 Services") -> Table:
    """Create table showing one row per service."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Service", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Container", style="dim")
    table.add_column("Health")
    table.add_column("Endpoint")

    for service in report.services:
        style = STATUS_STYLES[service.status]
        endpoint = ""
        if service.endpoint:
            color = "green" if service.endpoint.reachable else "red"
            endpoint = f"[{color}]{service.endpoint.detail}[/{color}] {service.endpoint.url}"

        table.add_row(
            service.entry.name,
            f"[{style}]{service.status.value}[/{style}]",
            (service.container_id or "-")[:12],
            (service.state.health if service.state and service.state.health else "-"),
            endpoint or "-",
        )

    return table


def print_report(report: HealthReport, console: Console) -> None:
    console.print(health_table(report))
    if report.failed:
        console.print("\n[red]✗ Health check failed: some services are not healthy![/red]")
    else:
        console.print("\n[green]✓ Health check passed: all services are healthy.[/green]")
