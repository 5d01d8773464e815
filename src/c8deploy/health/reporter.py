"""Health pass over the Camunda compose services."""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

from ..runner import CommandRunner
from .models import ContainerState, EndpointProbe, HealthReport, ServiceEntry, ServiceReport, classify
from .probes import endpoint_url, probe_endpoint
from .runtime import ComposeRuntime

logger = logging.getLogger("c8deploy.health")

# raw status for a container whose id is known but whose state could not be read
UNKNOWN_STATE = "unknown"

Prober = Callable[[str, int, float], EndpointProbe]


class HealthReporter:
    """Classify every registered service and aggregate one verdict.

    Findings never raise; they only decide ``HealthReport.failed``.
    """

    def __init__(
        self,
        runtime: ComposeRuntime,
        services: Iterable[ServiceEntry],
        host_address: str = "",
        log_tail: int = 20,
        prober: Optional[Prober] = probe_endpoint,
        http_timeout: float = 3.0,
    ):
        self.runtime = runtime
        self.services = tuple(services)
        self.host_address = host_address
        self.log_tail = log_tail
        self.prober = prober
        self.http_timeout = http_timeout

    @classmethod
    def from_config(cls, runner: CommandRunner, config: Dict[str, Any], host_address: str) -> "HealthReporter":
        health = config["health"]
        compose_dir = Path(config["camunda"]["compose_dir"]).expanduser().resolve()
        return cls(
            ComposeRuntime(runner, compose_dir),
            [ServiceEntry.from_dict(entry) for entry in health["services"]],
            host_address=host_address,
            log_tail=int(health["log_tail"]),
            prober=probe_endpoint if health.get("probe_endpoints", True) else None,
            http_timeout=float(health.get("http_timeout", 3.0)),
        )

    @classmethod
    def for_host(cls, host) -> "HealthReporter":
        return cls.from_config(host.runner, host.config, host.address)

    def check_service(self, entry: ServiceEntry) -> ServiceReport:
        ids = self.runtime.container_ids(entry.name)
        container_id = ids[0] if ids else None
        state = None
        if container_id:
            state = self.runtime.inspect_state(container_id)
            if state is None:
                logger.warning("Could not inspect container %s of %s", container_id, entry.name)
                state = ContainerState(UNKNOWN_STATE)

        report = ServiceReport(entry=entry, status=classify(state), container_id=container_id, state=state)

        if self.prober and entry.port and self.host_address and not report.status.is_failure:
            report.endpoint = self._probe(entry)
        return report

    def _probe(self, entry: ServiceEntry) -> EndpointProbe:
        # probes are diagnostic; a broken prober must not end the pass
        try:
            return self.prober(self.host_address, entry.port, self.http_timeout)
        except Exception as e:
            logger.warning("Endpoint probe for %s failed: %s", entry.name, e)
            return EndpointProbe(endpoint_url(self.host_address, entry.port), False, f"Error: {e}")

    def run(self) -> HealthReport:
        logger.info("Camunda 8 Health Check Started")
        report = HealthReport()

        report.compose_status = self.runtime.compose_status()
        logger.info("Docker Compose Services Status:\n%s", report.compose_status.rstrip())

        report.images = self.runtime.images()
        logger.info("Docker Images:\n%s", report.images.rstrip())

        logger.info("Container Health Checks:")
        for entry in self.services:
            service_report = self.check_service(entry)
            report.services.append(service_report)
            log = logger.warning if service_report.status.is_failure else logger.info
            log("%s: %s", entry.name, service_report.label)
            if service_report.endpoint:
                logger.info("%s: %s %s", entry.name, service_report.endpoint.url, service_report.endpoint.detail)

        report.resource_usage = self.runtime.top_usage(5)
        logger.info("Top 5 Containers by Memory Usage:\n%s", report.resource_usage)

        logger.debug("Last %d Lines of Each Service Log:", self.log_tail)
        for service_report in report.services:
            name = service_report.entry.name
            service_report.logs = self.runtime.logs(name, self.log_tail)
            if service_report.logs is None:
                logger.info("No logs found for %s", name)
            else:
                logger.debug("--- Logs: %s ---\n%s", name, service_report.logs.rstrip())

        if report.failed:
            logger.error("Health check failed: some services are not healthy!")
        else:
            logger.info("Health check passed: all services are healthy.")
        return report
