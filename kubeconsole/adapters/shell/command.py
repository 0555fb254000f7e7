"""
Shell command runner — the SINGLE PLACE where ``subprocess.run`` is called.

Every external invocation the console makes (package manager, kubectl,
minikube, curl, install/rm) goes through ``CommandRunner.run``.  Commands
are always argv lists, never shell strings.

There is no default timeout: if the external tool hangs, the session
waits for it.  ``timeout`` can be set from configuration.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time

from kubeconsole.adapters.base import Runner
from kubeconsole.core.models.action import Receipt

logger = logging.getLogger(__name__)

# Keep receipts bounded — list output on a busy cluster can be large
_MAX_CAPTURE = 64_000


class CommandRunner(Runner):
    """Run commands with subprocess and capture their output.

    Sudo handling:
        - already root → command runs as-is
        - otherwise → ``sudo`` prefix; sudo prompts on the terminal itself
    """

    def __init__(self, timeout: int | None = None):
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "shell"

    def is_root(self) -> bool:
        return os.geteuid() == 0

    def which(self, executable: str) -> str | None:
        return shutil.which(executable)

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def run(self, argv: list[str], *, sudo: bool = False, input: str | None = None) -> Receipt:
        cmd = list(argv)
        if sudo and not self.is_root():
            cmd = ["sudo", *cmd]

        logger.debug("Executing: %s", " ".join(cmd))
        start = time.monotonic()

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                input=input,
                timeout=self._timeout,
            )
        except FileNotFoundError:
            return Receipt.failure(
                argv,
                error=f"Command not found: {cmd[0]}",
                metadata={"sudo": sudo},
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                argv,
                error=f"Command timed out after {self._timeout}s",
                metadata={"sudo": sudo, "timeout": self._timeout},
            )
        except OSError as e:
            logger.exception("Subprocess error: %s", cmd)
            return Receipt.failure(argv, error=f"Command execution error: {e}")

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = (result.stdout or "")[-_MAX_CAPTURE:].strip()
        stderr = (result.stderr or "")[-_MAX_CAPTURE:].strip()

        if result.returncode == 0:
            return Receipt.success(
                argv,
                output=output,
                duration_ms=elapsed_ms,
                metadata={"sudo": sudo, "stderr": stderr},
            )

        return Receipt.failure(
            argv,
            error=stderr or f"Command exited with code {result.returncode}",
            output=output,
            return_code=result.returncode,
            duration_ms=elapsed_ms,
            metadata={"sudo": sudo},
        )
