"""Installation step identifiers and run state."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class Step(Enum):
    """One unit of forward setup work, in execution order."""

    TOOL_INSTALL = "tool-install"
    RUNTIME_INSTALL = "runtime-install"
    ORCHESTRATOR_INSTALL = "orchestrator-install"
    KERNEL_TUNING = "kernel-tuning"
    BUNDLE_FETCH = "bundle-fetch"
    ENV_CONFIG = "env-config"
    STACK_START = "stack-start"
    HEALTH_CHECK = "health-check"

    def __str__(self) -> str:
        return self.value


STEP_DESCRIPTIONS = {
    Step.TOOL_INSTALL: "Install required tools",
    Step.RUNTIME_INSTALL: "Install Docker",
    Step.ORCHESTRATOR_INSTALL: "Install Docker Compose",
    Step.KERNEL_TUNING: "Configure Elasticsearch kernel settings",
    Step.BUNDLE_FETCH: "Download Camunda bundle",
    Step.ENV_CONFIG: "Configure .env and docker-compose.yaml",
    Step.STACK_START: "Start Camunda stack",
    Step.HEALTH_CHECK: "Run health check",
}


@dataclass
class RunContext:
    """State of one installer run.

    ``completed`` only ever grows during forward execution; the unwinder reads
    it back to front.
    """

    completed: List[Step] = field(default_factory=list)
    current: Optional[Step] = None
    unwinding: bool = False
    unwound: List[Step] = field(default_factory=list)
    failures: List[Tuple[Step, str]] = field(default_factory=list)


@dataclass(frozen=True)
class InstallResult:
    """Outcome of a run, handed to the single caller that exits the process."""

    ok: bool
    completed: Tuple[Step, ...]
    failed_step: Optional[Step] = None
    error: Optional[BaseException] = None
    unwound: Tuple[Step, ...] = ()
    compensation_failures: Tuple[Tuple[Step, str], ...] = ()

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1
