"""Container runtime queries through the docker CLI."""

import json
import logging
from pathlib import Path
from typing import List, Optional

from ..errors import CommandError
from ..runner import CommandRunner
from .models import ContainerState

logger = logging.getLogger("c8deploy.runtime")

IMAGES_FORMAT = "table {{.Repository}}\t{{.Tag}}\t{{.Size}}"
STATS_FORMAT = "table {{.Name}}\t{{.CPUPerc}}\t{{.MemUsage}}"


class ComposeRuntime:
    """Read-only view of a docker compose project."""

    def __init__(self, runner: CommandRunner, compose_dir: Path):
        self.runner = runner
        self.compose_dir = compose_dir

    def _output(self, cmd: List[str]) -> Optional[str]:
        try:
            result = self.runner.run(cmd, cwd=self.compose_dir, check=False)
        except CommandError as e:
            logger.debug("%s", e)
            return None
        if result.returncode != 0:
            return None
        return result.stdout

    def container_ids(self, service: str) -> List[str]:
        """Ids of all containers (running or not) for ``service``."""
        out = self._output(["docker", "compose", "ps", "-a", "-q", service])
        return (out or "").split()

    def inspect_state(self, container_id: str) -> Optional[ContainerState]:
        out = self._output(["docker", "inspect", "--format", "{{json .State}}", container_id])
        if not out:
            return None
        try:
            return ContainerState.from_inspect(json.loads(out))
        except (ValueError, AttributeError):
            logger.debug("Unparseable inspect output for %s: %r", container_id, out)
            return None

    def logs(self, service: str, tail: int) -> Optional[str]:
        out = self._output(["docker", "compose", "logs", f"--tail={tail}", service])
        if out is None or not out.strip():
            return None
        return out

    def compose_status(self) -> str:
        return self._output(["docker", "compose", "ps"]) or ""

    def images(self) -> str:
        return self._output(["docker", "images", "--format", IMAGES_FORMAT]) or ""

    def top_usage(self, limit: int = 5) -> str:
        """Header plus the first ``limit`` rows of ``docker stats``."""
        out = self._output(["docker", "stats", "--no-stream", "--format", STATS_FORMAT]) or ""
        return "\n".join(out.splitlines()[: limit + 1])
