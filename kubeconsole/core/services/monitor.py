"""
Host resource snapshot — CPU load, memory, root disk usage.

Read-only, no external invocation.  Missing sources (non-Linux hosts,
restricted containers) degrade to ``None``.
"""

from __future__ import annotations

import os
import shutil


def _read_meminfo() -> dict[str, int]:
    """Read /proc/meminfo into a name → kB dict."""
    values: dict[str, int] = {}
    try:
        with open("/proc/meminfo") as f:
            for line in f:
                key, _, rest = line.partition(":")
                parts = rest.split()
                if parts:
                    values[key.strip()] = int(parts[0])
    except (FileNotFoundError, ValueError, OSError):
        pass
    return values


def resource_snapshot(path: str = "/") -> dict:
    """Current host resource usage.

    Returns::

        {
            "load": (0.42, 0.35, 0.30),
            "memory_used_mb": 3120,
            "memory_total_mb": 15890,
            "disk_used_percent": 61,
        }
    """
    try:
        load: tuple[float, float, float] | None = os.getloadavg()
    except OSError:
        load = None

    mem = _read_meminfo()
    total_kb = mem.get("MemTotal")
    avail_kb = mem.get("MemAvailable", mem.get("MemFree"))

    try:
        disk = shutil.disk_usage(path)
        disk_percent: int | None = round(disk.used * 100 / disk.total) if disk.total else None
    except OSError:
        disk_percent = None

    return {
        "load": load,
        "memory_used_mb": (total_kb - avail_kb) // 1024 if total_kb and avail_kb is not None else None,
        "memory_total_mb": total_kb // 1024 if total_kb else None,
        "disk_used_percent": disk_percent,
    }


def format_snapshot(snapshot: dict) -> str:
    load = snapshot.get("load")
    mem_used = snapshot.get("memory_used_mb")
    mem_total = snapshot.get("memory_total_mb")
    disk = snapshot.get("disk_used_percent")

    lines = [
        "CPU Load: " + (", ".join(f"{v:.2f}" for v in load) if load else "unavailable"),
        "Memory Usage: " + (f"{mem_used}M/{mem_total}M" if mem_used is not None and mem_total else "unavailable"),
        "Disk Usage: " + (f"{disk}%" if disk is not None else "unavailable"),
    ]
    return "\n".join(lines)
