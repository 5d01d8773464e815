"""Configuration management for c8deploy"""

import os
import socket
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..errors import ConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".c8deploy" / "config.yaml"

DEFAULT_SERVICES = [
    {"name": "zeebe", "port": None},
    {"name": "operate", "port": 8081},
    {"name": "tasklist", "port": 8082},
    {"name": "optimize", "port": 8083},
    {"name": "identity", "port": 8084},
    {"name": "keycloak", "port": 18080},
    {"name": "connectors", "port": None},
    {"name": "elasticsearch", "port": 9200},
    {"name": "web-modeler-restapi", "port": None},
    {"name": "web-modeler-webapp", "port": None},
    {"name": "web-modeler-db", "port": None},
]


class ConfigManager:
    """Manage c8deploy configuration"""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or DEFAULT_CONFIG_PATH

    def load(self) -> Dict[str, Any]:
        """Load configuration from file and environment"""
        config = self._load_defaults()

        # Load from file if exists
        if self.config_path.exists():
            with open(self.config_path) as f:
                try:
                    file_config = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ConfigError(f"Invalid YAML in {self.config_path}: {e}")
                if not isinstance(file_config, dict):
                    raise ConfigError(f"{self.config_path} must contain a mapping")
                for section in config:
                    if section in file_config and not isinstance(file_config[section], dict):
                        raise ConfigError(f"Section '{section}' in {self.config_path} must be a mapping")
                config = self._merge(config, file_config)

        # Override with environment variables
        config = self._apply_env_overrides(config)

        self._validate(config)
        return config

    def save(self, config: Dict[str, Any]) -> None:
        """Save configuration to file"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, "w") as f:
            yaml.dump(config, f, default_flow_style=False)

    def _load_defaults(self) -> Dict[str, Any]:
        """Load default configuration"""
        return {
            "camunda": {
                "version": "8.7",
                "bundle_url": (
                    "https://github.com/camunda/camunda-distributions/releases/download/"
                    "docker-compose-{version}/docker-compose-{version}.zip"
                ),
                "compose_dir": "./camunda-compose",
                "admin_user": "admin",
                "admin_password": "admin",
                "download_timeout": 300,
            },
            "host": {
                "address": "",
            },
            "install": {
                "required_tools": ["curl", "unzip", "tee", "nano", "tar"],
                "docker_packages": [
                    "docker-ce",
                    "docker-ce-cli",
                    "containerd.io",
                    "docker-buildx-plugin",
                    "docker-compose-plugin",
                ],
                "docker_repo": "https://download.docker.com/linux/ubuntu",
                "sysctl_file": "/etc/sysctl.d/99-elasticsearch.conf",
                "sysctl_setting": "vm.max_map_count=262144",
                "command_timeout": None,
            },
            "health": {
                "services": [dict(entry) for entry in DEFAULT_SERVICES],
                "log_tail": 20,
                "http_timeout": 3.0,
                "probe_endpoints": True,
            },
            "logging": {
                "level": "info",
                "dir": "./logs",
            },
        }

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge two configuration dictionaries"""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides"""
        if version := os.getenv("C8_VERSION"):
            config["camunda"]["version"] = version

        if compose_dir := os.getenv("C8_COMPOSE_DIR"):
            config["camunda"]["compose_dir"] = compose_dir

        if host := os.getenv("C8_HOST"):
            config["host"]["address"] = host

        if level := os.getenv("C8_LOG_LEVEL"):
            config["logging"]["level"] = level

        if log_dir := os.getenv("C8_LOG_DIR"):
            config["logging"]["dir"] = log_dir

        return config

    def _validate(self, config: Dict[str, Any]) -> None:
        services = config["health"].get("services")
        if not isinstance(services, list):
            raise ConfigError("health.services must be a list")
        for entry in services:
            if not isinstance(entry, dict) or not entry.get("name"):
                raise ConfigError(f"Invalid service entry: {entry!r}")
            port = entry.get("port")
            if port is not None and not (isinstance(port, int) and 0 < port < 65536):
                raise ConfigError(f"Invalid port for service {entry['name']}: {port!r}")

        tail = config["health"].get("log_tail")
        if not isinstance(tail, int) or tail <= 0:
            raise ConfigError(f"health.log_tail must be a positive integer, got {tail!r}")

        if "{version}" not in config["camunda"].get("bundle_url", ""):
            raise ConfigError("camunda.bundle_url must contain a {version} placeholder")


def detect_host_address() -> str:
    """Return the first address reported by ``hostname -I``."""
    try:
        result = subprocess.run(["hostname", "-I"], capture_output=True, text=True, check=False)
        addresses: List[str] = result.stdout.split()
        if result.returncode == 0 and addresses:
            return addresses[0]
    except FileNotFoundError:
        pass
    return socket.gethostbyname(socket.gethostname())


def resolve_host(config: Dict[str, Any]) -> str:
    """Configured host address, detected when unset."""
    return config["host"].get("address") or detect_host_address()
