"""Tests for configuration loading"""

import pytest
import yaml

from c8deploy.config.manager import ConfigManager, resolve_host
from c8deploy.errors import ConfigError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("C8_VERSION", "C8_COMPOSE_DIR", "C8_HOST", "C8_LOG_LEVEL", "C8_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_file(tmp_path):
    cfg = ConfigManager(tmp_path / "missing.yaml").load()

    assert cfg["camunda"]["version"] == "8.7"
    assert cfg["health"]["log_tail"] == 20
    assert cfg["install"]["sysctl_setting"] == "vm.max_map_count=262144"
    assert len(cfg["health"]["services"]) == 11


def test_file_values_merge_over_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"camunda": {"version": "8.6"}, "health": {"log_tail": 50}}))

    cfg = ConfigManager(path).load()

    assert cfg["camunda"]["version"] == "8.6"
    assert cfg["camunda"]["admin_user"] == "admin"
    assert cfg["health"]["log_tail"] == 50


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"camunda": {"version": "8.6"}}))
    monkeypatch.setenv("C8_VERSION", "8.8")
    monkeypatch.setenv("C8_HOST", "192.168.1.20")

    cfg = ConfigManager(path).load()

    assert cfg["camunda"]["version"] == "8.8"
    assert resolve_host(cfg) == "192.168.1.20"


def test_save_round_trip(tmp_path):
    manager = ConfigManager(tmp_path / "nested" / "config.yaml")
    cfg = manager.load()
    cfg["camunda"]["compose_dir"] = "/opt/camunda"

    manager.save(cfg)

    assert manager.load()["camunda"]["compose_dir"] == "/opt/camunda"


@pytest.mark.parametrize(
    "override",
    [
        {"health": {"services": [{"name": "zeebe", "port": 70000}]}},
        {"health": {"services": [{"port": 8080}]}},
        {"health": {"log_tail": 0}},
        {"camunda": {"bundle_url": "https://example.com/static.zip"}},
        {"health": None},
        {"health": []},
        {"camunda": None},
        {"camunda": "8.7"},
    ],
)
def test_invalid_values_rejected(tmp_path, override):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(override))

    with pytest.raises(ConfigError):
        ConfigManager(path).load()


def test_non_mapping_file_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigError):
        ConfigManager(path).load()
