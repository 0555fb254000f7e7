"""
Error taxonomy for the console.

Only ``EnvironmentProbeError`` is fatal to a session.  Everything else is
scoped to a single action or tool and returns control to the command loop.

External-system failures are not exceptions here: adapters capture them
in a ``Receipt`` (see ``kubeconsole.core.models.action``).
"""

from __future__ import annotations


class ConsoleError(Exception):
    """Base class for console errors.  Carries a machine-readable reason."""

    def __init__(self, reason: str, message: str = "") -> None:
        self.reason = reason
        self.message = message or reason
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.message and self.message != self.reason:
            return f"{self.message} ({self.reason})"
        return self.reason


class EnvironmentProbeError(ConsoleError):
    """Pre-flight failure — the session must not continue.

    Reasons: ``distro-undetectable``, ``network-unreachable``,
    ``missing-dependencies`` (strict mode only).
    """


class InstallError(ConsoleError):
    """A single tool's install/uninstall attempt failed.

    Reasons: ``unsupported-distro``, ``version-resolution-failed``,
    ``install-failed``, ``uninstall-failed``, ``unknown-tool``.
    """


class ValidationError(ConsoleError):
    """A parameter failed a local precondition before any external call."""

    def __init__(self, param: str, message: str) -> None:
        self.param = param
        super().__init__("invalid-parameter", f"{param}: {message}")
