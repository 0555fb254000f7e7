"""
Tool models — what can be installed and what happened when we tried.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DistroFamily = Literal["debian", "rhel", "arch", "unknown"]


class ToolSpec(BaseModel):
    """A tool the console knows how to install.

    ``package`` tools go through the host package manager.  ``binary``
    tools are downloaded from ``download_url`` and installed into
    ``install_path``.  ``version=None`` means "resolve latest stable
    from ``version_source``".
    """

    model_config = ConfigDict(frozen=True)

    name: str
    label: str = ""
    cli: str = ""
    kind: Literal["package", "binary"] = "package"

    version: str | None = None
    version_source: str | None = None
    download_url: str = ""
    install_path: str = ""

    # Per-family package name overrides (package tools only)
    packages: dict[str, str] = Field(default_factory=dict)

    @property
    def executable(self) -> str:
        return self.cli or self.name

    @property
    def target_path(self) -> str:
        return self.install_path or f"/usr/local/bin/{self.executable}"

    def package_name(self, family: str) -> str:
        return self.packages.get(family, self.name)


class InstallResult(BaseModel):
    """Outcome of ensure_installed / uninstall for one tool."""

    tool: str
    status: Literal["already_present", "installed", "removed", "absent"]
    version: str | None = None
    path: str | None = None
    message: str = ""
