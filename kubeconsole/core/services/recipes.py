"""
Tool recipes — the default ToolSpecs and the distro → family table.

Configuration can pin a version or move an install path; everything
else is fixed here.
"""

from __future__ import annotations

import platform

from kubeconsole.core.config.loader import ConsoleConfig
from kubeconsole.core.models.tool import ToolSpec

# /etc/os-release ID (or ID_LIKE entry) → package manager family
DISTRO_FAMILIES: dict[str, str] = {
    "ubuntu": "debian",
    "debian": "debian",
    "fedora": "rhel",
    "centos": "rhel",
    "rhel": "rhel",
    "arch": "arch",
}

ARCH_MAP: dict[str, str] = {"x86_64": "amd64", "aarch64": "arm64", "armv7l": "arm"}

KUBECTL_STABLE_URL = "https://dl.k8s.io/release/stable.txt"

DEFAULT_TOOLS: dict[str, ToolSpec] = {
    "curl": ToolSpec(
        name="curl",
        label="curl (HTTP client)",
        kind="package",
    ),
    "kubectl": ToolSpec(
        name="kubectl",
        label="kubectl (Kubernetes CLI)",
        kind="binary",
        version_source=KUBECTL_STABLE_URL,
        download_url="https://dl.k8s.io/release/{version}/bin/{os}/{arch}/kubectl",
        install_path="/usr/local/bin/kubectl",
    ),
    "minikube": ToolSpec(
        name="minikube",
        label="minikube (local cluster)",
        kind="binary",
        # "latest" is a path token on the release bucket, no lookup needed
        version="latest",
        download_url="https://storage.googleapis.com/minikube/releases/{version}/minikube-{os}-{arch}",
        install_path="/usr/local/bin/minikube",
    ),
}


def build_tool_specs(config: ConsoleConfig) -> dict[str, ToolSpec]:
    """Merge configuration overrides into the default recipes."""
    specs: dict[str, ToolSpec] = {}
    for name, spec in DEFAULT_TOOLS.items():
        override = config.tools.get(name)
        if override is None:
            specs[name] = spec
            continue
        update: dict = {}
        if override.version:
            update["version"] = override.version
        if override.install_path:
            update["install_path"] = override.install_path
        specs[name] = spec.model_copy(update=update)
    return specs


def family_for(distro_id: str, id_like: list[str] | None = None) -> str:
    """Map an os-release ID (falling back to ID_LIKE) to a family."""
    if distro_id in DISTRO_FAMILIES:
        return DISTRO_FAMILIES[distro_id]
    for like in id_like or []:
        if like in DISTRO_FAMILIES:
            return DISTRO_FAMILIES[like]
    return "unknown"


def host_platform() -> dict[str, str]:
    """``{os}`` / ``{arch}`` values for download URL templates."""
    machine = platform.machine().lower()
    return {
        "os": platform.system().lower() or "linux",
        "arch": ARCH_MAP.get(machine, machine),
    }


def render_download_url(tool: ToolSpec, version: str) -> str:
    values = {"version": version, **host_platform()}
    url = tool.download_url
    for key, value in values.items():
        url = url.replace(f"{{{key}}}", value)
    return url
