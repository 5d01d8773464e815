"""Target host description shared by forward steps and compensations."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from ..runner import CommandRunner


@dataclass
class Host:
    """The machine being installed, plus how to reach its tools."""

    runner: CommandRunner
    config: Dict[str, Any]
    address: str

    @property
    def version(self) -> str:
        return str(self.config["camunda"]["version"])

    @property
    def compose_dir(self) -> Path:
        return Path(self.config["camunda"]["compose_dir"]).expanduser().resolve()

    @property
    def compose_file(self) -> Path:
        return self.compose_dir / "docker-compose.yaml"

    @property
    def env_file(self) -> Path:
        return self.compose_dir / ".env"

    @property
    def bundle_url(self) -> str:
        return self.config["camunda"]["bundle_url"].format(version=self.version)

    @property
    def bundle_archive(self) -> Path:
        return self.compose_dir / f"docker-compose-{self.version}.zip"

    @property
    def sysctl_file(self) -> Path:
        return Path(self.config["install"]["sysctl_file"])
