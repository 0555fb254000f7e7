"""
Environment probe — pre-flight checks before the menu starts.

Order: distro, required binaries, network, virtualization.

    distro          fatal if undetectable (no package manager to use)
    binaries        reported; fatal only in strict mode
    network         fatal (every install/update needs it)
    virtualization  informational, degrades to "unknown"

Each check writes one audit entry.
"""

from __future__ import annotations

import logging
import urllib.request
from pathlib import Path

from kubeconsole.core.context import SessionState
from kubeconsole.core.errors import EnvironmentProbeError
from kubeconsole.core.models.environment import DistroProfile, EnvironmentReport
from kubeconsole.core.services.recipes import family_for

logger = logging.getLogger(__name__)


# ── Distro ──────────────────────────────────────────────────────


def read_os_release(path: Path) -> dict[str, str]:
    """Parse an os-release file into a key → value dict.

    Raises:
        OSError: If the file cannot be read.
    """
    values: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip().strip('"').strip("'")
    return values


def detect_distro(path: Path) -> DistroProfile:
    """Resolve the distro profile from an os-release file.

    Raises:
        EnvironmentProbeError: ``distro-undetectable`` if the file is
            missing, unreadable, or has no ``ID``.
    """
    try:
        values = read_os_release(path)
    except (OSError, UnicodeDecodeError) as e:
        raise EnvironmentProbeError(
            "distro-undetectable", f"Cannot detect the Linux distribution: {e}",
        ) from e

    distro_id = values.get("ID", "").lower()
    if not distro_id:
        raise EnvironmentProbeError(
            "distro-undetectable", f"Cannot detect the Linux distribution: no ID in {path}",
        )

    id_like = values.get("ID_LIKE", "").lower().split()
    return DistroProfile(
        id=distro_id,
        id_like=id_like,
        family=family_for(distro_id, id_like),  # type: ignore[arg-type]
        pretty_name=values.get("PRETTY_NAME", ""),
    )


# ── Network ─────────────────────────────────────────────────────


def check_network(url: str, timeout: int = 5) -> bool:
    """One HEAD request to ``url``; True if it answered at all."""
    try:
        req = urllib.request.Request(
            url,
            method="HEAD",
            headers={"User-Agent": "kubeconsole/1.0"},
        )
        with urllib.request.urlopen(req, timeout=timeout):
            return True
    except Exception as exc:
        logger.debug("Network probe to %s failed: %s", url, exc)
        return False


# ── Virtualization ──────────────────────────────────────────────


def detect_virtualization(session: SessionState) -> str:
    """Classify the virtualization context via systemd-detect-virt.

    Returns ``"none"`` on bare metal, the hypervisor/container name when
    virtualized, or ``"unknown"`` when detection is unavailable.
    """
    if session.runner.which("systemd-detect-virt") is None:
        return "unknown"
    receipt = session.runner.run(["systemd-detect-virt"])
    # systemd-detect-virt prints "none" and exits 1 on bare metal
    value = (receipt.output or "").strip().splitlines()
    return value[0] if value else ("none" if receipt.failed else "unknown")


# ── Orchestration ───────────────────────────────────────────────


def probe(session: SessionState, *, strict: bool = False) -> EnvironmentReport:
    """Run all pre-flight checks and store the report on the session.

    Raises:
        EnvironmentProbeError: On undetectable distro, unreachable
            network, or (strict mode) missing required binaries.
    """
    audit = session.audit
    config = session.config

    try:
        distro = detect_distro(Path(config.os_release_path))
    except EnvironmentProbeError as e:
        audit.error(e.message)
        raise
    session.distro = distro
    if distro.supported:
        audit.info(f"Detected distribution: {distro.id} ({distro.family})")
    else:
        audit.info(f"Detected distribution: {distro.id} (no supported package manager)")

    binaries = {name: session.runner.which(name) for name in config.required_binaries}
    missing = [name for name, path in binaries.items() if path is None]
    for name in missing:
        audit.error(f"{name} is required but not installed. Please install it first.")
    if not missing:
        audit.info("All required dependencies are present.")
    if missing and strict:
        raise EnvironmentProbeError(
            "missing-dependencies", f"Missing required binaries: {', '.join(missing)}",
        )

    if not check_network(config.network_probe_url, timeout=config.network_timeout):
        e = EnvironmentProbeError(
            "network-unreachable",
            "Network connectivity is required. Please check your connection.",
        )
        audit.error(e.message)
        raise e
    audit.info(f"Network reachable ({config.network_probe_url})")

    virt = detect_virtualization(session)
    if virt == "unknown":
        audit.info("Virtualization detection not supported on this system")
    elif virt == "none":
        audit.info("Running on bare metal")
    else:
        audit.info(f"Running in a virtualized environment: {virt}")

    report = EnvironmentReport(
        distro=distro,
        network_ok=True,
        network_endpoint=config.network_probe_url,
        virtualization=virt,
        is_root=session.runner.is_root(),
        binaries=binaries,
    )
    session.report = report
    return report
