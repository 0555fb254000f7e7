"""
Environment models — the host as seen by the pre-flight probe.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from kubeconsole.core.models.tool import DistroFamily


class DistroProfile(BaseModel):
    """Resolved distribution identity.  Exactly one per session."""

    id: str
    id_like: list[str] = Field(default_factory=list)
    family: DistroFamily = "unknown"
    pretty_name: str = ""

    @property
    def supported(self) -> bool:
        return self.family != "unknown"


class EnvironmentReport(BaseModel):
    """Everything the pre-flight phase learned about the host."""

    distro: DistroProfile
    network_ok: bool = False
    network_endpoint: str = ""
    virtualization: str = "unknown"
    is_root: bool = False
    binaries: dict[str, str | None] = Field(default_factory=dict)

    @property
    def missing_binaries(self) -> list[str]:
        return [name for name, path in self.binaries.items() if path is None]

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data["missing_binaries"] = self.missing_binaries
        return data
