"""
Shared test fixtures and configuration.

Every fixture works against a RecordingRunner: no subprocess, no network.
"""

from pathlib import Path

import pytest

from kubeconsole.adapters.mock import RecordingRunner
from kubeconsole.core.config.loader import ConsoleConfig
from kubeconsole.core.context import SessionState
from kubeconsole.core.models.environment import DistroProfile
from kubeconsole.core.persistence.audit import AuditLog

UBUNTU_OS_RELEASE = """\
NAME="Ubuntu"
VERSION="22.04.4 LTS (Jammy Jellyfish)"
ID=ubuntu
ID_LIKE=debian
PRETTY_NAME="Ubuntu 22.04.4 LTS"
"""


@pytest.fixture
def os_release(tmp_path: Path) -> Path:
    """An Ubuntu os-release file."""
    path = tmp_path / "os-release"
    path.write_text(UBUNTU_OS_RELEASE)
    return path


@pytest.fixture
def config(tmp_path: Path, os_release: Path) -> ConsoleConfig:
    return ConsoleConfig(
        log_file=str(tmp_path / "k8s_setup.log"),
        os_release_path=str(os_release),
        network_probe_url="https://example.invalid/stable.txt",
    )


@pytest.fixture
def runner() -> RecordingRunner:
    """Mock runner with the default required binaries on its search path."""
    return RecordingRunner(binaries={"curl", "sudo", "docker"})


@pytest.fixture
def audit(tmp_path: Path) -> AuditLog:
    log = AuditLog(tmp_path / "k8s_setup.log", echo=False)
    yield log
    log.close()


@pytest.fixture
def session(config: ConsoleConfig, runner: RecordingRunner, audit: AuditLog) -> SessionState:
    """A session whose pre-flight already resolved an Ubuntu host."""
    state = SessionState.create(config, runner, audit=audit)
    state.distro = DistroProfile(id="ubuntu", id_like=["debian"], family="debian")
    return state
