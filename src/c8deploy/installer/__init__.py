"""Installation orchestrator for the Camunda 8 compose stack."""

from .bootstrap import build_plan, full_install
from .harness import run_steps
from .host import Host
from .rollback import COMPENSATIONS, Compensation, Unwinder
from .steps import InstallResult, RunContext, Step

__all__ = [
    "COMPENSATIONS",
    "Compensation",
    "Host",
    "InstallResult",
    "RunContext",
    "Step",
    "Unwinder",
    "build_plan",
    "full_install",
    "run_steps",
]
