"""
Action and Receipt models — the execution contract.

Receipts are what adapters hand back for every external invocation.
Adapters never raise; a failed tool run is a Receipt with status
``failed``.  ActionDescriptors form the static menu catalog, and an
ActionInvocation is the record of one operator selection.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of one external command invocation."""

    status: Literal["ok", "failed"] = "ok"
    argv: list[str] = Field(default_factory=list)

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    return_code: int | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the invocation succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the invocation failed."""
        return self.status == "failed"

    @property
    def command(self) -> str:
        return " ".join(self.argv)

    @classmethod
    def success(cls, argv: list[str], output: str = "", **kwargs: Any) -> Receipt:
        """Create a success receipt."""
        return cls(status="ok", argv=list(argv), output=output, return_code=0, **kwargs)

    @classmethod
    def failure(cls, argv: list[str], error: str, **kwargs: Any) -> Receipt:
        """Create a failure receipt."""
        return cls(status="failed", argv=list(argv), error=error, **kwargs)


# ── Catalog ─────────────────────────────────────────────────────

ParamKind = Literal["text", "positive_int", "non_negative_int", "choice"]


class ParamSpec(BaseModel):
    """One operator-supplied parameter of an action."""

    model_config = ConfigDict(frozen=True)

    name: str
    prompt: str
    kind: ParamKind = "text"
    choices: tuple[str, ...] = ()
    default: str | None = None
    required: bool = True


Outcome = Literal["succeeded", "external-failure", "user-cancelled", "validation-error"]

# handler(params, session) -> receipts, in invocation order
Handler = Callable[..., list[Receipt]]


class ActionDescriptor(BaseModel):
    """A menu entry: selector, label, parameters and handler.

    An entry with a ``submenu`` has no handler of its own; the router
    asks for a sub-selection and dispatches to the chosen child.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str
    label: str
    help: str = ""
    params: tuple[ParamSpec, ...] = ()
    destructive: bool = False
    # Non-mutating but exposes sensitive data; gated like a destructive action
    sensitive: bool = False
    handler: Handler | None = None
    # Logged on success, formatted with the collected params
    done: str = ""
    submenu: tuple[ActionDescriptor, ...] = ()
    exit: bool = False

    @property
    def is_submenu(self) -> bool:
        return bool(self.submenu)

    @property
    def requires_confirmation(self) -> bool:
        return self.destructive or self.sensitive

    def child(self, key: str) -> ActionDescriptor | None:
        for entry in self.submenu:
            if entry.key == key:
                return entry
        return None


class ActionInvocation(BaseModel):
    """One operator selection on its way through the dispatcher."""

    key: str
    label: str
    params: dict[str, Any] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=_now_iso)
    outcome: Outcome | None = None
    receipts: list[Receipt] = Field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == "succeeded"
