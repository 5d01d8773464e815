"""Configuration loading for c8deploy."""

from .manager import ConfigManager, DEFAULT_CONFIG_PATH, detect_host_address, resolve_host

__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "detect_host_address",
    "resolve_host",
]
