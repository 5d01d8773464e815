import subprocess
import zipfile
from pathlib import Path

import pytest

from c8deploy.config.manager import ConfigManager
from c8deploy.errors import CommandError
from c8deploy.installer.host import Host
from c8deploy.runner import CommandRunner


class FakeRunner(CommandRunner):
    """Records commands instead of running them.

    ``responses`` maps a command prefix (tuple) to (returncode, stdout).
    The longest matching prefix wins; unmatched commands succeed silently.
    """

    def __init__(self, responses=None, tools=("curl", "unzip", "tee", "nano", "tar", "docker")):
        super().__init__(use_sudo=False)
        self.responses = dict(responses or {})
        self.tools = set(tools)
        self.calls = []

    def run(self, cmd, cwd=None, env=None, input=None, check=True):
        self.calls.append({"cmd": list(cmd), "cwd": cwd, "input": input})
        returncode, stdout = 0, ""
        best = -1
        for prefix, response in self.responses.items():
            if tuple(cmd[: len(prefix)]) == prefix and len(prefix) > best:
                best = len(prefix)
                returncode, stdout = response
        result = subprocess.CompletedProcess(cmd, returncode, stdout, "")
        if check and returncode != 0:
            raise CommandError(cmd, returncode, "")
        return result

    def which(self, tool):
        return f"/usr/bin/{tool}" if tool in self.tools else None

    def commands(self):
        return [call["cmd"] for call in self.calls]


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def config(tmp_path):
    cfg = ConfigManager(tmp_path / "absent.yaml").load()
    cfg["camunda"]["compose_dir"] = str(tmp_path / "camunda-compose")
    cfg["install"]["sysctl_file"] = str(tmp_path / "99-elasticsearch.conf")
    cfg["logging"]["dir"] = str(tmp_path / "logs")
    return cfg


@pytest.fixture
def host(fake_runner, config):
    return Host(runner=fake_runner, config=config, address="10.0.0.5")


COMPOSE_YAML = """\
services:
  keycloak:
    image: bitnami/keycloak:25
    environment:
      KC_DB: postgres
  web-modeler-restapi:
    image: camunda/web-modeler-restapi:${CAMUNDA_WEB_MODELER_VERSION}
    environment:
      RESTAPI_PUSHER_HOST: web-modeler-websockets
  web-modeler-webapp:
    image: camunda/web-modeler-webapp:${CAMUNDA_WEB_MODELER_VERSION}
    environment:
      - CLIENT_PUSHER_PORT=8060
"""

ENV_FILE = """\
CAMUNDA_WEB_MODELER_VERSION=8.7.0
HOST=localhost
KEYCLOAK_HOST=localhost
"""


def write_bundle_archive(archive: Path) -> Path:
    """Write a minimal bundle zip holding .env and docker-compose.yaml."""
    archive.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr(".env", ENV_FILE)
        zf.writestr("docker-compose.yaml", COMPOSE_YAML)
    return archive
