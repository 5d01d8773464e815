"""Health pass data types and the classification policy."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ServiceStatus(Enum):
    NOT_FOUND = "not-found"
    STOPPED = "stopped"
    DEGRADED = "degraded"
    OK = "ok"
    OK_UNMONITORED = "ok-unmonitored"

    @property
    def is_failure(self) -> bool:
        return self in (ServiceStatus.NOT_FOUND, ServiceStatus.STOPPED, ServiceStatus.DEGRADED)


STATUS_LABELS = {
    ServiceStatus.NOT_FOUND: "❌ Not Found",
    ServiceStatus.STOPPED: "❌ Not Running",
    ServiceStatus.DEGRADED: "⚠️ Running but Unhealthy",
    ServiceStatus.OK: "✅ Running & Healthy",
    ServiceStatus.OK_UNMONITORED: "🟡 Running (No Healthcheck)",
}


@dataclass(frozen=True)
class ServiceEntry:
    name: str
    port: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceEntry":
        return cls(name=str(data["name"]), port=data.get("port"))


@dataclass(frozen=True)
class ContainerState:
    """The parts of ``docker inspect`` .State that classification reads."""

    status: str
    health: Optional[str] = None

    @classmethod
    def from_inspect(cls, state: Dict[str, Any]) -> "ContainerState":
        health = state.get("Health") or {}
        return cls(status=str(state.get("Status", "")).lower(), health=health.get("Status"))


@dataclass(frozen=True)
class EndpointProbe:
    url: str
    reachable: bool
    detail: str
    latency_ms: Optional[float] = None


@dataclass
class ServiceReport:
    entry: ServiceEntry
    status: ServiceStatus
    container_id: Optional[str] = None
    state: Optional[ContainerState] = None
    logs: Optional[str] = None
    endpoint: Optional[EndpointProbe] = None

    @property
    def label(self) -> str:
        return STATUS_LABELS[self.status]


@dataclass
class HealthReport:
    services: List[ServiceReport] = field(default_factory=list)
    compose_status: str = ""
    images: str = ""
    resource_usage: str = ""

    @property
    def failed(self) -> bool:
        failed = False
        for report in self.services:
            failed = failed or report.status.is_failure
        return failed

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0

    def by_name(self, name: str) -> ServiceReport:
        for report in self.services:
            if report.entry.name == name:
                return report
        raise KeyError(name)


def classify(state: Optional[ContainerState]) -> ServiceStatus:
    """Classify a service from its container state.

    ``None`` means no container exists. Only an ``unhealthy`` probe counts
    against a running container; ``starting`` or no probe at all is reported
    as unmonitored.
    """
    if state is None:
        return ServiceStatus.NOT_FOUND
    if state.status != "running":
        return ServiceStatus.STOPPED
    if state.health == "unhealthy":
        return ServiceStatus.DEGRADED
    if state.health == "healthy":
        return ServiceStatus.OK
    return ServiceStatus.OK_UNMONITORED
