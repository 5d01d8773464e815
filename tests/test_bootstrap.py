"""Tests for the forward installation steps"""

import logging
from pathlib import Path

import pytest

from c8deploy.errors import MissingArtifactError, PrerequisiteError
from c8deploy.health.models import HealthReport, ServiceEntry, ServiceReport, ServiceStatus
from c8deploy.health.reporter import HealthReporter
from c8deploy.health.runtime import ComposeRuntime
from c8deploy.installer import bootstrap
from c8deploy.installer.host import Host
from c8deploy.installer.steps import Step

from conftest import FakeRunner, write_bundle_archive


class StubReporter:
    def __init__(self, status=ServiceStatus.OK):
        self.status = status
        self.runs = 0

    def run(self):
        self.runs += 1
        return HealthReport(services=[ServiceReport(ServiceEntry("zeebe"), self.status)])


def prepared_host(config, runner):
    """Host whose tools, docker, sysctl and bundle archive are already in place."""
    host = Host(runner=runner, config=config, address="10.0.0.5")
    host.sysctl_file.write_text("vm.max_map_count=262144\n")
    write_bundle_archive(host.bundle_archive)
    return host


def test_plan_follows_step_order(host):
    assert [step for step, _ in bootstrap.build_plan(host)] == list(Step)


def test_present_tools_are_not_installed(host):
    bootstrap.install_required_tools(host)

    assert host.runner.commands() == []


def test_missing_tool_is_installed(config):
    class InstallingRunner(FakeRunner):
        def run(self, cmd, **kwargs):
            if cmd[:3] == ["apt-get", "install", "-y"]:
                self.tools.update(cmd[3:])
            return super().run(cmd, **kwargs)

    runner = InstallingRunner(tools=("curl", "unzip", "tee", "tar"))
    bootstrap.install_required_tools(Host(runner=runner, config=config, address="h"))

    assert runner.commands() == [["apt-get", "install", "-y", "nano"]]


def test_tool_that_stays_missing_is_a_prerequisite_error(config):
    runner = FakeRunner(tools=("curl", "unzip", "tee", "tar"))

    with pytest.raises(PrerequisiteError, match="nano"):
        bootstrap.install_required_tools(Host(runner=runner, config=config, address="h"))


def test_existing_docker_is_kept(host):
    bootstrap.install_docker(host)

    assert host.runner.commands() == [["docker", "--version"]]


def test_compose_plugin_installed_when_missing(config):
    runner = FakeRunner({("docker", "compose", "version"): (1, "")})
    host = Host(runner=runner, config=config, address="h")

    with pytest.raises(PrerequisiteError, match="Docker Compose"):
        bootstrap.install_docker_compose(host)
    assert ["apt-get", "install", "-y", "docker-compose-plugin"] in runner.commands()


def test_kernel_setting_written_once(host):
    bootstrap.configure_kernel(host)
    first = host.runner.calls[0]
    assert first["cmd"] == ["tee", str(host.sysctl_file)]
    assert first["input"] == "vm.max_map_count=262144\n"
    assert host.runner.commands()[1] == ["sysctl", "--system"]

    host.runner.calls.clear()
    host.sysctl_file.write_text("vm.max_map_count=262144\n")
    bootstrap.configure_kernel(host)
    assert host.runner.commands() == []


def test_env_config_needs_extracted_bundle(host):
    with pytest.raises(MissingArtifactError, match=".env"):
        bootstrap.configure_env(host)


def test_unhealthy_verdict_does_not_fail_the_step(host):
    reporter = StubReporter(ServiceStatus.NOT_FOUND)

    bootstrap.run_health_check(host, lambda h: reporter)

    assert reporter.runs == 1


def test_full_install_succeeds(config):
    runner = FakeRunner()
    host = prepared_host(config, runner)
    reporter = StubReporter()

    result = bootstrap.full_install(host, lambda h: reporter)

    assert result.ok
    assert list(result.completed) == list(Step)
    assert list(result.completed).count(Step.HEALTH_CHECK) == 1
    assert ["docker", "compose", "up", "-d"] in runner.commands()
    assert "HOST=10.0.0.5" in host.env_file.read_text().splitlines()
    assert reporter.runs == 1


def test_stack_start_failure_rolls_back_everything_before_it(config):
    runner = FakeRunner({("docker", "compose", "up"): (1, "")})
    host = prepared_host(config, runner)

    result = bootstrap.full_install(host, lambda h: StubReporter())

    assert not result.ok
    assert result.exit_code == 1
    assert result.failed_step == Step.STACK_START
    assert list(result.unwound) == [
        Step.ENV_CONFIG,
        Step.BUNDLE_FETCH,
        Step.KERNEL_TUNING,
        Step.ORCHESTRATOR_INSTALL,
        Step.RUNTIME_INSTALL,
        Step.TOOL_INSTALL,
    ]
    assert not host.compose_dir.exists()
    assert ["sysctl", "--system"] in runner.commands()


def test_broken_endpoint_probe_does_not_roll_back_a_healthy_stack(config):
    runner = FakeRunner(
        {
            ("docker", "compose", "ps", "-a", "-q", "operate"): (0, "abc123\n"),
            ("docker", "inspect"): (0, '{"Status": "running", "Health": {"Status": "healthy"}}'),
        }
    )
    host = prepared_host(config, runner)

    def broken_prober(address, port, timeout):
        raise ValueError(f"cannot probe {address}")

    def reporter_factory(h):
        runtime = ComposeRuntime(h.runner, h.compose_dir)
        return HealthReporter(runtime, [ServiceEntry("operate", 8081)], host_address="fe80::1", prober=broken_prober)

    result = bootstrap.full_install(host, reporter_factory)

    assert result.ok
    assert list(result.unwound) == []
    assert host.compose_dir.exists()


def test_health_step_writes_its_own_log(host):
    class LoggingReporter(StubReporter):
        def run(self):
            logging.getLogger("c8deploy.health").warning("zeebe: not running")
            return super().run()

    handlers = list(logging.getLogger("c8deploy").handlers)
    bootstrap.run_health_check(host, lambda h: LoggingReporter())

    log_files = list(Path(host.config["logging"]["dir"]).glob("health_*.log"))
    assert len(log_files) == 1
    assert "zeebe: not running" in log_files[0].read_text()
    assert logging.getLogger("c8deploy").handlers == handlers
