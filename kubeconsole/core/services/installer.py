"""
Dependency resolver / installer.

``ensure_installed`` is idempotent: the presence check (``locate``) gates
the install branch, so a second call right after a successful install is
always ``already_present``.  Binary tools count as present when their
install path exists, even if that directory is not on the search path.

Two install paths:

    package   host package manager for the session's distro family
    binary    resolve version → curl download → ``install -m 0755``

Version resolution for binary tools happens at most once per session
per tool; ``update_tools`` is the only caller that forces a refresh.
Nothing here retries automatically.
"""

from __future__ import annotations

import logging
import urllib.request

from kubeconsole.adapters.base import PackageManager
from kubeconsole.core.context import SessionState
from kubeconsole.core.errors import InstallError
from kubeconsole.core.models.action import Receipt
from kubeconsole.core.models.tool import InstallResult, ToolSpec
from kubeconsole.core.services.recipes import render_download_url

logger = logging.getLogger(__name__)

# Tools the update action refreshes
UPDATABLE_TOOLS = ("kubectl", "minikube")


# ── Version resolution ──────────────────────────────────────────


def fetch_latest_version(url: str, timeout: int = 10) -> str:
    """Fetch a bare "latest stable" version string from ``url``.

    Raises:
        InstallError: ``version-resolution-failed`` if the source is
            unreachable or returns nothing usable.
    """
    try:
        req = urllib.request.Request(url, headers={"User-Agent": "kubeconsole/1.0"})
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            body = resp.read(256).decode("utf-8", errors="replace")
    except Exception as exc:
        raise InstallError(
            "version-resolution-failed", f"Cannot resolve latest version from {url}: {exc}",
        ) from exc

    version = body.strip().splitlines()[0].strip() if body.strip() else ""
    if not version or " " in version:
        raise InstallError(
            "version-resolution-failed", f"Unexpected version string from {url}: {body[:60]!r}",
        )
    return version


def resolve_version(tool: ToolSpec, session: SessionState, *, refresh: bool = False) -> str:
    """Resolve the version selector for a binary tool.

    Explicit configured version wins.  Otherwise the session cache is
    used, and only on a miss (or ``refresh``) is the version source
    queried.
    """
    if tool.version:
        return tool.version

    if not refresh and tool.name in session.versions:
        return session.versions[tool.name]

    if not tool.version_source:
        raise InstallError(
            "version-resolution-failed", f"No version or version source configured for {tool.name}",
        )

    version = fetch_latest_version(tool.version_source, timeout=session.config.network_timeout)
    session.versions[tool.name] = version
    session.audit.info(f"Resolved {tool.name} version {version}")
    return version


# ── Install / uninstall ─────────────────────────────────────────


def locate(tool: ToolSpec, session: SessionState) -> str | None:
    """Path of the installed ``tool``, or None if it is absent.

    Binary tools are looked for at their install path first, then on the
    search path (a distro-packaged copy counts as installed).
    """
    if tool.kind == "binary" and session.runner.exists(tool.target_path):
        return tool.target_path
    return session.runner.which(tool.executable)


def ensure_installed(tool: ToolSpec, session: SessionState) -> InstallResult:
    """Install ``tool`` unless it is already present.

    Raises:
        InstallError: ``unsupported-distro`` (package tools on an unknown
            family; no package manager is invoked),
            ``version-resolution-failed``, or ``install-failed``.
    """
    existing = locate(tool, session)
    if existing:
        session.audit.info(f"{tool.name} is already installed.")
        return InstallResult(tool=tool.name, status="already_present", path=existing)

    session.audit.info(f"{tool.name} is not installed. Installing...")
    return _install(tool, session)


def reinstall(tool: ToolSpec, session: SessionState, *, refresh_version: bool = False) -> InstallResult:
    """Install ``tool`` even if present (used by the update action)."""
    return _install(tool, session, refresh_version=refresh_version)


def _install(tool: ToolSpec, session: SessionState, *, refresh_version: bool = False) -> InstallResult:
    # Every install procedure is chosen per distro family, binary downloads included
    _require_supported_distro(session)
    if tool.kind == "package":
        return _install_package(tool, session)
    return _install_binary(tool, session, refresh_version=refresh_version)


def _install_package(tool: ToolSpec, session: SessionState) -> InstallResult:
    pm = _require_supported_distro(session)

    package = tool.package_name(pm.family)
    receipts = pm.install(package)
    _raise_on_failure(tool, receipts, "install-failed", session)

    session.audit.info(f"{tool.name} installed successfully.")
    return InstallResult(
        tool=tool.name,
        status="installed",
        path=locate(tool, session),
        message=f"installed package {package} via {pm.family}",
    )


def _install_binary(tool: ToolSpec, session: SessionState, *, refresh_version: bool = False) -> InstallResult:
    version = resolve_version(tool, session, refresh=refresh_version)
    url = render_download_url(tool, version)
    staging = f"/tmp/kubeconsole-{tool.executable}"

    session.audit.info(f"Installing {tool.name} version {version}...")

    receipts: list[Receipt] = []
    download = session.runner.run(["curl", "-fsSL", "-o", staging, url])
    receipts.append(download)
    _raise_on_failure(tool, receipts, "install-failed", session)

    placed = session.runner.run(
        ["install", "-o", "root", "-g", "root", "-m", "0755", staging, tool.target_path],
        sudo=True,
    )
    receipts.append(placed)
    _raise_on_failure(tool, receipts, "install-failed", session)

    cleanup = session.runner.run(["rm", "-f", staging])
    if cleanup.failed:
        logger.debug("Could not remove staging file %s: %s", staging, cleanup.error)

    session.audit.info(f"{tool.name} installed successfully.")
    return InstallResult(tool=tool.name, status="installed", version=version, path=tool.target_path)


def uninstall(tool: ToolSpec, session: SessionState) -> InstallResult:
    """Remove ``tool`` if present; no-op (not an error) if absent.

    Raises:
        InstallError: ``unsupported-distro`` for package tools on an
            unknown family, ``uninstall-failed`` on a non-zero exit.
    """
    existing = locate(tool, session)
    if not existing:
        session.audit.info(f"{tool.name} is not installed; nothing to remove.")
        return InstallResult(tool=tool.name, status="absent")

    session.audit.info(f"Uninstalling {tool.name}...")

    if tool.kind == "package":
        pm = _require_supported_distro(session)
        receipts = pm.remove(tool.package_name(pm.family))
    else:
        receipts = [session.runner.run(["rm", "-f", existing], sudo=True)]

    _raise_on_failure(tool, receipts, "uninstall-failed", session)
    session.versions.pop(tool.name, None)
    session.audit.info(f"{tool.name} uninstalled successfully.")
    return InstallResult(tool=tool.name, status="removed", path=existing)


def update_tools(session: SessionState, names: tuple[str, ...] = UPDATABLE_TOOLS) -> list[InstallResult]:
    """Re-resolve versions and reinstall each tool.

    Stops at the first failure; the InstallError propagates.
    """
    session.audit.info(f"Updating {' and '.join(names)}...")
    results = []
    for name in names:
        tool = _require_tool(session, name)
        results.append(reinstall(tool, session, refresh_version=True))
    session.audit.info("Tools updated successfully.")
    return results


def tool_status(session: SessionState) -> dict[str, str | None]:
    """Presence of every known tool: name → resolved path or None."""
    return {name: locate(spec, session) for name, spec in session.tools.items()}


def _require_supported_distro(session: SessionState) -> PackageManager:
    pm = session.package_manager
    if pm is None:
        distro = session.distro.id if session.distro else "unknown"
        session.audit.error(f"Unsupported distribution: {distro}")
        raise InstallError("unsupported-distro", f"Unsupported distribution: {distro}")
    return pm


def _require_tool(session: SessionState, name: str) -> ToolSpec:
    tool = session.tool(name)
    if tool is None:
        raise InstallError("unknown-tool", f"No recipe for '{name}'")
    return tool


def _raise_on_failure(
    tool: ToolSpec,
    receipts: list[Receipt],
    reason: str,
    session: SessionState,
) -> None:
    failed = next((r for r in receipts if r.failed), None)
    if failed is None:
        return
    message = f"{tool.name}: '{failed.command}' failed: {failed.error}"
    session.audit.error(message)
    raise InstallError(reason, message)
