"""
Configuration loader — reads kubeconsole.yml into a ConsoleConfig.

The file is optional: with no file, every setting takes its default.
``KUBECTL_VERSION`` / ``MINIKUBE_VERSION`` in the environment pin tool
versions and win over the file.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONSOLE_CONFIG_FILE = "kubeconsole.yml"

# Env var → tool name
_VERSION_ENV = {
    "KUBECTL_VERSION": "kubectl",
    "MINIKUBE_VERSION": "minikube",
}


class ConfigError(Exception):
    """Raised when console configuration is invalid."""


class ToolOverride(BaseModel):
    """Per-tool settings from the config file."""

    version: str | None = None
    install_path: str | None = None


class ConsoleConfig(BaseModel):
    """Validated console configuration."""

    log_file: str = "k8s_setup.log"
    os_release_path: str = "/etc/os-release"
    network_probe_url: str = "https://dl.k8s.io/release/stable.txt"
    network_timeout: int = 5
    required_binaries: list[str] = Field(default_factory=lambda: ["curl", "sudo", "docker"])
    sample_image: str = "k8s.gcr.io/echoserver:1.4"
    # None = no timeout; an external tool that hangs hangs the session
    command_timeout: int | None = None
    tools: dict[str, ToolOverride] = Field(default_factory=dict)

    def tool_version(self, name: str) -> str | None:
        override = self.tools.get(name)
        return override.version if override else None


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for kubeconsole.yml starting from the given directory, walking up."""
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONSOLE_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path | None = None, *, env: Mapping[str, str] | None = None) -> ConsoleConfig:
    """Load and validate console configuration.

    Args:
        path: Explicit config path.  If None, searches upward from cwd;
            if nothing is found, defaults are used.
        env: Environment mapping for version overrides (default: os.environ).

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    data: dict = {}
    if path is not None:
        if not path.is_file():
            if explicit:
                raise ConfigError(f"Config file not found: {path}")
        else:
            data = _read_yaml(path)

    try:
        config = ConsoleConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid console configuration: {e}") from e

    _apply_env_overrides(config, os.environ if env is None else env)

    logger.debug("Console config: %s", config.model_dump())
    return config


def _read_yaml(path: Path) -> dict:
    logger.debug("Loading console config from %s", path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def _apply_env_overrides(config: ConsoleConfig, env: Mapping[str, str]) -> None:
    for var, tool in _VERSION_ENV.items():
        value = env.get(var, "").strip()
        if not value:
            continue
        override = config.tools.setdefault(tool, ToolOverride())
        override.version = value
        logger.info("%s pinned to %s via %s", tool, value, var)
