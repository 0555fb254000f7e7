"""
Audit log — append-only record of every probe, install and action.

One line per event::

    [INFO] 2026-10-18 14:02:11 Starting Minikube...
    [ERROR] 2026-10-18 14:02:15 Deployment web not found

Multi-line messages (typically a failed tool's stderr) are folded onto
one line, joined with `` | ``.

Lines are echoed to the operator console (like ``tee -a``) and forwarded
to the ``logging`` tree.  The log is append-only: entries are never
modified or deleted.

Recording never raises.  If the sink cannot be written, the failure is
reported once on stderr and the session carries on.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import IO, Literal

import click
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_FILE = "k8s_setup.log"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

Level = Literal["info", "error"]

_LINE_RE = re.compile(r"^\[(?P<level>[A-Z]+)\] (?P<ts>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}) (?P<msg>.*)$")


def single_line(message: str) -> str:
    """Fold a multi-line message (tool stderr) into one audit line."""
    return " | ".join(part.strip() for part in message.splitlines() if part.strip())


class AuditEntry(BaseModel):
    """A single audit log line."""

    level: Level = "info"
    timestamp: datetime = Field(default_factory=datetime.now)
    message: str = ""

    def format(self) -> str:
        return f"[{self.level.upper()}] {self.timestamp.strftime(TIMESTAMP_FORMAT)} {self.message}"

    @classmethod
    def parse(cls, line: str) -> AuditEntry | None:
        """Parse one formatted line.  Returns None for anything unrecognised."""
        match = _LINE_RE.match(line.rstrip("\n"))
        if not match:
            return None
        level = match.group("level").lower()
        if level not in ("info", "error"):
            return None
        return cls(
            level=level,  # type: ignore[arg-type]
            timestamp=datetime.strptime(match.group("ts"), TIMESTAMP_FORMAT),
            message=match.group("msg"),
        )


class AuditLog:
    """Append-only audit sink.

    The file handle is opened lazily on first write and held until
    ``close()``; each line is flushed as soon as it is written so the
    entry is durable before control returns to the command loop.
    """

    def __init__(self, path: Path | None = None, *, echo: bool = True):
        self._path = path if path is not None else Path(DEFAULT_AUDIT_FILE)
        self._echo = echo
        self._handle: IO[str] | None = None
        self._sink_failed = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def sink_failed(self) -> bool:
        """True once a write to the sink has failed."""
        return self._sink_failed

    def record(self, level: Level, message: str, timestamp: datetime | None = None) -> AuditEntry:
        """Append one entry.  Never raises."""
        entry = AuditEntry(level=level, message=single_line(message), timestamp=timestamp or datetime.now())
        line = entry.format()

        if self._echo:
            click.secho(line, fg="red" if level == "error" else None)

        # Already on the console; the logging tree only sees it at INFO
        logger.info("%s", line)

        try:
            if self._handle is None:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._handle = self._path.open("a", encoding="utf-8")
            self._handle.write(line + "\n")
            self._handle.flush()
        except OSError as e:
            if not self._sink_failed:
                click.echo(f"⚠️  Audit log unavailable ({self._path}): {e}", err=True)
            self._sink_failed = True
            logger.debug("Audit write failed: %s", e)

        return entry

    def info(self, message: str) -> AuditEntry:
        return self.record("info", message)

    def error(self, message: str) -> AuditEntry:
        return self.record("error", message)

    def entries(self) -> list[AuditEntry]:
        """Read all entries back from the sink, oldest first."""
        if not self._path.is_file():
            return []

        entries = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    entry = AuditEntry.parse(line)
                    if entry is None:
                        logger.warning("Skipping unrecognised audit line %d", line_num)
                        continue
                    entries.append(entry)
        except OSError as e:
            logger.error("Failed to read audit log: %s", e)

        return entries

    def read_recent(self, n: int = 20) -> list[AuditEntry]:
        if n <= 0:
            return []
        return self.entries()[-n:]

    def close(self) -> None:
        if self._handle is not None:
            try:
                self._handle.close()
            except OSError:
                pass
            self._handle = None
