"""Forward installation steps for a Camunda 8 docker-compose host."""

import getpass
import logging
from pathlib import Path
from typing import Callable, List, Optional

import httpx

from ..errors import CommandError, PrerequisiteError
from ..health.reporter import HealthReporter
from ..logs import run_log_file
from .bundle import fetch_bundle
from .compose_config import configure_bundle
from .harness import Plan, run_steps
from .host import Host
from .rollback import Unwinder
from .steps import InstallResult, RunContext, Step

logger = logging.getLogger("c8deploy.installer")

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}
DOCKER_KEYRING = Path("/etc/apt/keyrings/docker.gpg")
DOCKER_SOURCES = Path("/etc/apt/sources.list.d/docker.list")


def apt_install(host: Host, packages: List[str]) -> None:
    host.runner.sudo(["apt-get", "install", "-y"] + packages, env=APT_ENV)


def install_required_tools(host: Host) -> None:
    """Check required tools, installing any that are missing."""
    logger.info("STEP 0: Checking required tools...")

    for tool in host.config["install"]["required_tools"]:
        if host.runner.which(tool):
            logger.info("%s is already installed.", tool)
            continue

        logger.info("%s not found. Attempting installation...", tool)
        try:
            apt_install(host, [tool])
        except CommandError as e:
            raise PrerequisiteError(f"{tool} installation failed: {e}")
        if not host.runner.which(tool):
            raise PrerequisiteError(f"{tool} installation failed.")
        logger.info("%s installed successfully.", tool)


def _add_docker_repository(host: Host) -> None:
    runner = host.runner
    runner.sudo(["rm", "-f", str(DOCKER_SOURCES), str(DOCKER_KEYRING)])
    runner.sudo(["apt-get", "update", "-y"], env=APT_ENV)
    apt_install(host, ["ca-certificates", "curl", "gnupg", "lsb-release"])

    runner.sudo(["mkdir", "-p", str(DOCKER_KEYRING.parent)])
    runner.sudo(["chmod", "755", str(DOCKER_KEYRING.parent)])

    repo = host.config["install"]["docker_repo"].rstrip("/")
    try:
        key = httpx.get(f"{repo}/gpg", follow_redirects=True, timeout=30).text
    except httpx.HTTPError as e:
        raise PrerequisiteError(f"Could not fetch Docker signing key: {e}")
    runner.sudo(["gpg", "--batch", "--yes", "--dearmor", "-o", str(DOCKER_KEYRING)], input=key)
    runner.sudo(["chmod", "a+r", str(DOCKER_KEYRING)])

    arch = runner.run(["dpkg", "--print-architecture"]).stdout.strip()
    codename = runner.run(["lsb_release", "-cs"]).stdout.strip()
    source = f"deb [arch={arch} signed-by={DOCKER_KEYRING}] {repo} {codename} stable\n"
    runner.sudo(["tee", str(DOCKER_SOURCES)], input=source)


def install_docker(host: Host) -> None:
    """Install Docker engine from the upstream apt repository."""
    logger.info("STEP 1: Checking Docker...")
    runner = host.runner

    if runner.which("docker"):
        logger.info("Docker is already installed.")
    else:
        logger.info("Docker not found. Installing...")
        _add_docker_repository(host)
        runner.sudo(["apt-get", "update", "-y"], env=APT_ENV)
        apt_install(host, list(host.config["install"]["docker_packages"]))
        runner.sudo(["systemctl", "enable", "--now", "docker"])
        runner.sudo(["usermod", "-aG", "docker", getpass.getuser()])

        if not runner.which("docker"):
            raise PrerequisiteError("Docker installation failed.")
        logger.info("Docker installed successfully.")

    logger.info(runner.run(["docker", "--version"]).stdout.strip())


def install_docker_compose(host: Host) -> None:
    """Make sure the ``docker compose`` plugin is available."""
    logger.info("STEP 2: Checking Docker Compose...")
    runner = host.runner

    if runner.succeeds(["docker", "compose", "version"]):
        logger.info("Docker Compose is already installed.")
    else:
        logger.info("Docker Compose not found. Installing...")
        apt_install(host, ["docker-compose-plugin"])
        if not runner.succeeds(["docker", "compose", "version"]):
            raise PrerequisiteError("Docker Compose installation failed.")
        logger.info("Docker Compose installed successfully.")

    logger.info(runner.run(["docker", "compose", "version"]).stdout.strip())


def configure_kernel(host: Host) -> None:
    """Raise vm.max_map_count for Elasticsearch."""
    logger.info("STEP 3: Configuring Elasticsearch...")
    setting = host.config["install"]["sysctl_setting"]
    sysctl_file = host.sysctl_file

    try:
        current = sysctl_file.read_text()
    except OSError:
        current = ""

    if setting in current.splitlines():
        logger.info("Elasticsearch kernel config already set.")
        return

    host.runner.sudo(["tee", str(sysctl_file)], input=setting + "\n")
    host.runner.sudo(["sysctl", "--system"])
    logger.info("Elasticsearch kernel config updated.")


def download_bundle(host: Host) -> None:
    logger.info("STEP 4: Downloading Camunda bundle...")
    fetch_bundle(
        host.bundle_url,
        host.bundle_archive,
        host.compose_dir,
        timeout=float(host.config["camunda"]["download_timeout"]),
    )
    logger.info("Camunda compose downloaded and extracted.")


def configure_env(host: Host) -> None:
    logger.info("STEP 5: Configuring environment variables...")
    camunda = host.config["camunda"]
    configure_bundle(
        host.env_file,
        host.compose_file,
        host.address,
        camunda["admin_user"],
        camunda["admin_password"],
    )
    logger.info(".env and docker-compose.yaml configured.")


def start_stack(host: Host) -> None:
    logger.info("STEP 6: Starting Camunda stack...")
    logger.info("Using COMPOSE_DIR=%s", host.compose_dir)
    host.runner.run(["docker", "compose", "up", "-d"], cwd=host.compose_dir)
    logger.info("Camunda stack started successfully.")


def run_health_check(host: Host, reporter_factory: Optional[Callable[[Host], HealthReporter]] = None) -> None:
    """Run one health pass; an unhealthy verdict is logged, not raised.

    The pass is also written to its own ``health_<timestamp>.log``.
    """
    logger.info("STEP 7: Running Health Check...")
    factory = reporter_factory or HealthReporter.for_host
    with run_log_file(Path(host.config["logging"]["dir"]), "health") as log_file:
        logger.info("Health check log: %s", log_file)
        report = factory(host).run()
    if report.failed:
        logger.warning("Health check reported failures, continuing for diagnostics...")
    else:
        logger.info("Health check passed: all services are healthy.")


def build_plan(host: Host, reporter_factory: Optional[Callable[[Host], HealthReporter]] = None) -> Plan:
    """Pair each Step with its forward action for ``host``."""
    return [
        (Step.TOOL_INSTALL, lambda: install_required_tools(host)),
        (Step.RUNTIME_INSTALL, lambda: install_docker(host)),
        (Step.ORCHESTRATOR_INSTALL, lambda: install_docker_compose(host)),
        (Step.KERNEL_TUNING, lambda: configure_kernel(host)),
        (Step.BUNDLE_FETCH, lambda: download_bundle(host)),
        (Step.ENV_CONFIG, lambda: configure_env(host)),
        (Step.STACK_START, lambda: start_stack(host)),
        (Step.HEALTH_CHECK, lambda: run_health_check(host, reporter_factory)),
    ]


def full_install(host: Host, reporter_factory: Optional[Callable[[Host], HealthReporter]] = None) -> InstallResult:
    """Run the full installation process, rolling back on failure."""
    logger.info("Camunda %s installation started for host %s", host.version, host.address)

    ctx = RunContext()
    result = run_steps(build_plan(host, reporter_factory), Unwinder(host), ctx)

    if result.ok:
        logger.info(
            "ALL DONE: Installation finished. Steps completed: %s",
            " ".join(str(step) for step in result.completed),
        )
    return result
