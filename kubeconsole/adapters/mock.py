"""
Recording runner — universal test double for external invocations.

Used in ``--mock`` mode and in tests to exercise the console without
touching the host.  Every call is recorded; responses default to success
and can be configured per command prefix.

With ``simulate=True`` the mock also mirrors the effect of install and
removal commands on its fake search path, so presence checks behave as
they would on a real host.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from kubeconsole.adapters.base import Runner
from kubeconsole.core.models.action import Receipt

_PM_INSTALL = {("apt-get", "install"), ("yum", "install"), ("pacman", "-Syu"), ("pacman", "-S")}
_PM_REMOVE = {("apt-get", "remove"), ("yum", "remove"), ("pacman", "-R")}

# Directories the fake search path covers, in lookup order
SEARCH_PATH = ("/usr/local/bin", "/usr/bin")


@dataclass
class RecordedCall:
    argv: list[str]
    sudo: bool = False
    input: str | None = None

    @property
    def command(self) -> str:
        return " ".join(self.argv)


class RecordingRunner(Runner):
    """Mock runner that records every invocation.

    Args:
        binaries: Executables that resolve on the fake search path
            (as /usr/local/bin/<name>).
        files: Absolute paths that exist on the fake filesystem.
        root: What ``is_root()`` reports.
        simulate: Track install/remove effects on ``binaries`` and ``files``.
        default_output: Output of un-configured successful calls.
    """

    def __init__(
        self,
        binaries: set[str] | None = None,
        *,
        files: set[str] | None = None,
        root: bool = False,
        simulate: bool = True,
        default_output: str = "[mock] executed",
    ):
        self.binaries: set[str] = set(binaries or ())
        self.files: set[str] = set(files or ())
        self._root = root
        self._simulate = simulate
        self._default_output = default_output
        self._responses: list[tuple[tuple[str, ...], Receipt]] = []
        self._call_log: list[RecordedCall] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[RecordedCall]:
        """All calls this mock has received, in order."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def commands(self) -> list[str]:
        """Space-joined argv of every recorded call."""
        return [call.command for call in self._call_log]

    def is_root(self) -> bool:
        return self._root

    def which(self, executable: str) -> str | None:
        for directory in SEARCH_PATH:
            candidate = f"{directory}/{executable}"
            if candidate in self.files:
                return candidate
        if executable in self.binaries:
            return f"{SEARCH_PATH[0]}/{executable}"
        return None

    def exists(self, path: str) -> bool:
        return path in self.files or path == self.which(os.path.basename(path))

    def set_response(self, prefix: list[str], receipt: Receipt) -> None:
        """Return ``receipt`` for any argv starting with ``prefix``."""
        self._responses.insert(0, (tuple(prefix), receipt))

    def set_failure(self, prefix: list[str], error: str = "Mock failure", return_code: int = 1) -> None:
        """Configure commands starting with ``prefix`` to fail."""
        self.set_response(
            prefix,
            Receipt.failure(list(prefix), error=error, return_code=return_code),
        )

    def run(self, argv: list[str], *, sudo: bool = False, input: str | None = None) -> Receipt:
        self._call_log.append(RecordedCall(argv=list(argv), sudo=sudo, input=input))

        for prefix, receipt in self._responses:
            if tuple(argv[: len(prefix)]) == prefix:
                response = receipt.model_copy(update={"argv": list(argv)})
                if response.ok and self._simulate:
                    self._apply_effects(argv)
                return response

        if self._simulate:
            self._apply_effects(argv)
        return Receipt.success(argv, output=self._default_output, metadata={"mock": True})

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()

    def _apply_effects(self, argv: list[str]) -> None:
        if not argv:
            return
        head = tuple(argv[:2])
        if head in _PM_INSTALL and len(argv) > 2:
            self.binaries.add(argv[-1])
        elif head in _PM_REMOVE and len(argv) > 2:
            self.binaries.discard(argv[-1])
        elif argv[0] == "install" and len(argv) > 1:
            self.files.add(argv[-1])
        elif argv[0] == "rm" and len(argv) > 1:
            path = argv[-1]
            self.files.discard(path)
            name = os.path.basename(path)
            if path == f"{SEARCH_PATH[0]}/{name}":
                self.binaries.discard(name)
