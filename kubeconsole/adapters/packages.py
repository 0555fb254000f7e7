"""
Host package manager adapter.

One fixed install/remove verb set per distribution family.  The exit
status of each command is the only success signal.
"""

from __future__ import annotations

import logging

from kubeconsole.adapters.base import PackageManager, Runner
from kubeconsole.core.models.action import Receipt

logger = logging.getLogger(__name__)

# family → verb → steps; the package name is appended to the last step
PACKAGE_COMMANDS: dict[str, dict[str, list[list[str]]]] = {
    "debian": {
        "install": [["apt-get", "update"], ["apt-get", "install", "-y"]],
        "remove": [["apt-get", "remove", "-y"]],
    },
    "rhel": {
        "install": [["yum", "install", "-y"]],
        "remove": [["yum", "remove", "-y"]],
    },
    "arch": {
        "install": [["pacman", "-Syu", "--noconfirm"]],
        "remove": [["pacman", "-R", "--noconfirm"]],
    },
}


class HostPackageManager(PackageManager):
    """Package manager for a known distribution family.

    Every command runs with sudo.  Multi-step verbs (``apt-get update``
    then ``install``) stop at the first failed step; only the last step
    takes the package argument.
    """

    def __init__(self, family: str, runner: Runner):
        if family not in PACKAGE_COMMANDS:
            raise ValueError(f"No package manager for distro family '{family}'")
        self._family = family
        self._runner = runner

    @property
    def family(self) -> str:
        return self._family

    def install(self, package: str) -> list[Receipt]:
        return self._run_steps(PACKAGE_COMMANDS[self._family]["install"], package)

    def remove(self, package: str) -> list[Receipt]:
        return self._run_steps(PACKAGE_COMMANDS[self._family]["remove"], package)

    def _run_steps(self, steps: list[list[str]], package: str) -> list[Receipt]:
        receipts: list[Receipt] = []
        for i, step in enumerate(steps):
            argv = [*step, package] if i == len(steps) - 1 else list(step)
            receipt = self._runner.run(argv, sudo=True)
            receipts.append(receipt)
            if not receipt.ok:
                logger.debug("Package step failed: %s", receipt.command)
                break
        return receipts


def supported_families() -> list[str]:
    return sorted(PACKAGE_COMMANDS)
