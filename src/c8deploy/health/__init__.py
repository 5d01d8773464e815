"""Container health reporting for the Camunda compose stack."""

from .models import ContainerState, HealthReport, ServiceEntry, ServiceReport, ServiceStatus, classify
from .reporter import HealthReporter
from .runtime import ComposeRuntime

__all__ = [
    "ComposeRuntime",
    "ContainerState",
    "HealthReport",
    "HealthReporter",
    "ServiceEntry",
    "ServiceReport",
    "ServiceStatus",
    "classify",
]
