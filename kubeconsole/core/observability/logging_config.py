"""
Diagnostic logging for the console.

Two streams exist side by side:

    audit log     what the operator did and what happened (persistence/audit.py),
                  echoed to stdout as it is written
    diagnostics   this module: stderr, plus an optional KCON_LOG_FILE

stdout belongs to the menu and to ``--json`` output, so diagnostics never
go there.  Audit lines are forwarded into ``logging`` at INFO; the console
handler drops them (they are already on screen) while the diagnostic
file keeps them, so the file reads as one interleaved timeline.

Level precedence:  CLI flag  >  KCON_LOG_LEVEL  >  WARNING
"""

from __future__ import annotations

import logging
import os
import sys

AUDIT_LOGGER = "kubeconsole.core.persistence.audit"

LEVEL_ENV = "KCON_LOG_LEVEL"
FILE_ENV = "KCON_LOG_FILE"
FILE_LEVEL_ENV = "KCON_LOG_FILE_LEVEL"

_FMT_DEBUG = ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S")
_FMT_INFO = ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S")
_FMT_PLAIN = ("%(message)s", None)
_FILE_FORMAT = ("%(asctime)s %(levelname)-5s %(name)s  %(message)s", "%Y-%m-%d %H:%M:%S")


class _SkipAuditEcho(logging.Filter):
    """Drop records the audit log already echoed to the operator."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not record.name.startswith(AUDIT_LOGGER)


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Configure the root logger once at startup.

    Args:
        level: Level name from a CLI flag; falls back to ``KCON_LOG_LEVEL``.
        log_file: Diagnostic file; falls back to ``KCON_LOG_FILE``.  Its
            level comes from ``KCON_LOG_FILE_LEVEL`` (default: INFO).
    """
    console_level = parse_level(level or os.environ.get(LEVEL_ENV))

    if console_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG
    elif console_level <= logging.INFO:
        fmt, datefmt = _FMT_INFO
    else:
        fmt, datefmt = _FMT_PLAIN

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    console.addFilter(_SkipAuditEcho())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    log_file = log_file or os.environ.get(FILE_ENV)
    if log_file:
        file_level_name = os.environ.get(FILE_LEVEL_ENV)
        file_level = parse_level(file_level_name) if file_level_name else logging.INFO
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(*_FILE_FORMAT))
        root.addHandler(handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)


def parse_level(name: str | None) -> int:
    """Level name → numeric level; unknown or empty means WARNING."""
    numeric = logging.getLevelName(name.upper()) if name else None
    return numeric if isinstance(numeric, int) else logging.WARNING
