"""
Rollback of completed installation steps.

Each Step maps to a Compensation. Steps that cannot be undone say so
explicitly, so the unwind log shows every step it was handed.
"""

import logging
import shutil
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional

from ..errors import CommandError
from .host import Host
from .steps import RunContext, Step

logger = logging.getLogger("c8deploy.rollback")


@dataclass(frozen=True)
class Compensation:
    """How to undo one step: an ``undo`` callable, or the reason it can't be."""

    description: str
    undo: Optional[Callable[[Host], None]] = None

    @property
    def reversible(self) -> bool:
        return self.undo is not None


def cannot_undo(reason: str) -> Compensation:
    return Compensation(description=reason)


def _best_effort(host: Host, cmd: List[str], failure: str, level: int = logging.ERROR) -> None:
    try:
        result = host.runner.sudo(cmd, check=False)
    except CommandError as e:
        logger.log(level, "%s: %s", failure, e)
        return
    if result.returncode != 0:
        logger.log(level, failure)


def remove_docker(host: Host) -> None:
    logger.info("Removing Docker packages...")
    _best_effort(host, ["systemctl", "stop", "docker", "docker.socket"], "Failed to stop Docker", logging.WARNING)
    _best_effort(
        host,
        ["apt-get", "purge", "-y"] + list(host.config["install"]["docker_packages"]),
        "Docker package purge failed",
    )
    _best_effort(host, ["apt-get", "autoremove", "-y"], "Autoremove failed", logging.WARNING)
    _best_effort(
        host,
        ["rm", "-rf", "/var/lib/docker", "/var/lib/containerd"],
        "Failed to remove Docker directories",
        logging.WARNING,
    )
    _best_effort(host, ["groupdel", "docker"], "Failed to delete the docker group", logging.WARNING)


def remove_compose(host: Host) -> None:
    logger.info("Removing Docker Compose...")
    _best_effort(
        host,
        ["apt-get", "remove", "-y", "docker-compose-plugin"],
        "Docker Compose plugin removal failed",
    )
    _best_effort(
        host,
        ["rm", "-f", "/usr/local/bin/docker-compose"],
        "Standalone Docker Compose binary not found or already removed",
        logging.WARNING,
    )


def revert_kernel_tuning(host: Host) -> None:
    _best_effort(host, ["rm", "-f", str(host.sysctl_file)], "Elasticsearch config removal failed")
    _best_effort(host, ["sysctl", "--system"], "Sysctl reload failed")


def remove_bundle(host: Host) -> None:
    logger.info("Cleaning up Camunda Docker resources and files...")
    if host.compose_file.exists():
        try:
            result = host.runner.run(
                ["docker", "compose", "down", "--rmi", "all", "--volumes"],
                cwd=host.compose_dir,
                check=False,
            )
        except CommandError as e:
            logger.error("Removing Camunda containers, images and volumes failed: %s", e)
        else:
            if result.returncode != 0:
                logger.info("No containers, images or volumes to remove.")
    if host.compose_dir.exists():
        shutil.rmtree(host.compose_dir)


def stop_stack(host: Host) -> None:
    if not host.compose_dir.exists():
        logger.warning("Compose directory %s not found, nothing to shut down", host.compose_dir)
        return
    result = host.runner.run(["docker", "compose", "down"], cwd=host.compose_dir, check=False)
    if result.returncode != 0:
        logger.error("Camunda stack shutdown failed")


COMPENSATIONS: Dict[Step, Compensation] = {
    Step.TOOL_INSTALL: cannot_undo("Cannot uninstall system tools"),
    Step.RUNTIME_INSTALL: Compensation("Purge Docker packages and data", remove_docker),
    Step.ORCHESTRATOR_INSTALL: Compensation("Remove Docker Compose", remove_compose),
    Step.KERNEL_TUNING: Compensation("Remove sysctl drop-in and reload", revert_kernel_tuning),
    Step.BUNDLE_FETCH: Compensation("Remove Camunda resources and bundle directory", remove_bundle),
    Step.ENV_CONFIG: cannot_undo("Environment edits are removed with the bundle directory"),
    Step.STACK_START: Compensation("docker compose down", stop_stack),
    Step.HEALTH_CHECK: Compensation("docker compose down", stop_stack),
}

_missing = [step for step in Step if step not in COMPENSATIONS]
if _missing:
    raise RuntimeError(f"No compensation declared for: {', '.join(map(str, _missing))}")


class Unwinder:
    """Undo completed steps in reverse order, once per run."""

    def __init__(self, host: Host, compensations: Optional[Mapping[Step, Compensation]] = None):
        self.host = host
        self.compensations = COMPENSATIONS if compensations is None else compensations

    def unwind(self, ctx: RunContext) -> List[Step]:
        """Compensate ``ctx.completed`` back to front.

        A failing compensation is logged and recorded; the remaining steps
        are still visited. A second call on the same context does nothing.
        """
        if ctx.unwinding:
            logger.error("Rollback already in progress, not starting it again")
            return []
        ctx.unwinding = True

        logger.error("Installation failed. Starting rollback...")
        for step in reversed(ctx.completed):
            logger.info("START : Rollback %s", step)
            ctx.unwound.append(step)

            compensation = self.compensations.get(step)
            if compensation is None:
                logger.error("Unknown rollback step: %s", step)
                continue
            if not compensation.reversible:
                logger.warning("Cannot undo %s: %s. Skipping...", step, compensation.description)
                continue

            try:
                compensation.undo(self.host)
            except Exception as e:
                logger.error("Rollback of %s failed: %s", step, e)
                ctx.failures.append((step, str(e)))

        logger.info("END : Rollback complete.")
        return list(ctx.unwound)
