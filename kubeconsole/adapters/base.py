"""
Adapter base — the capability contracts between the console and the host.

The console core only talks to the outside world through these
interfaces, never directly to subprocess:

    Runner          — run one argv, return a Receipt; resolve executables
    ClusterRuntime  — one method per logical cluster operation
    PackageManager  — install / remove a host package

Adapters NEVER raise for external failures; they return a failed Receipt.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from kubeconsole.core.models.action import Receipt


class Runner(ABC):
    """Executes external commands.

    To create a new runner:
        1. Subclass Runner
        2. Implement run, which, exists and is_root
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Runner identifier (e.g. 'shell', 'mock')."""

    @abstractmethod
    def run(self, argv: list[str], *, sudo: bool = False, input: str | None = None) -> Receipt:
        """Run ``argv`` to completion and return a receipt.

        Args:
            argv: Command and arguments.  Never passed through a shell.
            sudo: Run with elevated privileges (no-op when already root).
            input: Text fed to the process's stdin.

        MUST never raise.  All failures are captured in the Receipt.
        """

    @abstractmethod
    def which(self, executable: str) -> str | None:
        """Resolve ``executable`` on the search path, or None."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Whether a file exists at the absolute ``path``."""

    @abstractmethod
    def is_root(self) -> bool:
        """Whether the console runs with elevated privileges."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class ClusterRuntime(ABC):
    """Logical cluster operations.

    Implementations translate each call into an external invocation.
    A client-library implementation could replace the CLI one without
    touching the action handlers.
    """

    @abstractmethod
    def start(self, driver: str) -> Receipt: ...

    @abstractmethod
    def run_pod(self, name: str, image: str) -> Receipt: ...

    @abstractmethod
    def create_deployment(self, name: str, image: str, replicas: int | None = None) -> Receipt: ...

    @abstractmethod
    def expose(self, name: str, *, port: int, type: str = "LoadBalancer") -> Receipt: ...

    @abstractmethod
    def scale(self, name: str, replicas: int, kind: str = "deployment") -> Receipt: ...

    @abstractmethod
    def delete(self, kind: str, name: str, namespace: str | None = None) -> Receipt: ...

    @abstractmethod
    def get(self, kind: str, name: str | None = None, *,
            namespace: str | None = None, output: str | None = None) -> Receipt: ...

    @abstractmethod
    def cluster_info(self) -> Receipt: ...

    @abstractmethod
    def logs(self, pod: str, namespace: str | None = None) -> Receipt: ...

    @abstractmethod
    def create_namespace(self, name: str) -> Receipt: ...

    @abstractmethod
    def create_role(self, name: str, namespace: str, *,
                    verbs: list[str], resources: list[str]) -> Receipt: ...

    @abstractmethod
    def create_rolebinding(self, name: str, role: str, service_account: str,
                           namespace: str) -> Receipt: ...

    @abstractmethod
    def create_secret(self, name: str, namespace: str, literals: list[str]) -> Receipt: ...

    @abstractmethod
    def create_service_account(self, name: str, namespace: str) -> Receipt: ...

    @abstractmethod
    def apply_manifest(self, manifest: str) -> Receipt: ...


class PackageManager(ABC):
    """Host package manager for one distribution family."""

    @property
    @abstractmethod
    def family(self) -> str: ...

    @abstractmethod
    def install(self, package: str) -> list[Receipt]:
        """Install a package.  Returns one receipt per command run."""

    @abstractmethod
    def remove(self, package: str) -> list[Receipt]:
        """Remove a package.  Returns one receipt per command run."""
