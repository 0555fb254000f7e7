"""
Session context — everything one console session needs, in one object.

Built once at startup by ``SessionState.create()`` and passed explicitly
to every component; there is no module-level state.  Tests construct it
directly with fake runners.

After start-up only two things change: ``report``/``distro`` are filled
in by the pre-flight probe, and ``versions`` caches resolved tool
versions (written by resolution, cleared per tool by the update action).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from kubeconsole.adapters.base import ClusterRuntime, PackageManager, Runner
from kubeconsole.adapters.kubectl import KubectlRuntime
from kubeconsole.adapters.packages import HostPackageManager
from kubeconsole.core.config.loader import ConsoleConfig
from kubeconsole.core.models.environment import DistroProfile, EnvironmentReport
from kubeconsole.core.models.tool import ToolSpec
from kubeconsole.core.persistence.audit import AuditLog
from kubeconsole.core.services.recipes import build_tool_specs

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Process-wide session context."""

    config: ConsoleConfig
    audit: AuditLog
    runner: Runner
    runtime: ClusterRuntime
    tools: dict[str, ToolSpec]
    distro: DistroProfile | None = None
    report: EnvironmentReport | None = None
    versions: dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        config: ConsoleConfig,
        runner: Runner,
        *,
        audit: AuditLog | None = None,
        runtime: ClusterRuntime | None = None,
    ) -> SessionState:
        return cls(
            config=config,
            audit=audit or AuditLog(Path(config.log_file)),
            runner=runner,
            runtime=runtime or KubectlRuntime(runner),
            tools=build_tool_specs(config),
        )

    @property
    def package_manager(self) -> PackageManager | None:
        """Package manager for the resolved distro, or None if unsupported."""
        if self.distro is None or not self.distro.supported:
            return None
        return HostPackageManager(self.distro.family, self.runner)

    def tool(self, name: str) -> ToolSpec | None:
        return self.tools.get(name)

    def close(self) -> None:
        """Tear down: flush and close the audit sink."""
        self.audit.close()
