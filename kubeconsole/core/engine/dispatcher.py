"""
Dispatcher — runs one catalog action through the fixed sequence.

    Selected → ParamsCollected → (Confirmed | Cancelled)
             → Invoked → (Succeeded | ExternalFailure)

Validation failures stop before the gate.  Cancellation stops before any
external call.  Every path ends with exactly one outcome entry in the
audit log, written before control returns to the command loop.  Nothing
is retried.
"""

from __future__ import annotations

import logging
from typing import Any

import click

from kubeconsole.core.context import SessionState
from kubeconsole.core.engine.gate import confirm
from kubeconsole.core.engine.params import ParameterSource, collect
from kubeconsole.core.errors import InstallError, ValidationError
from kubeconsole.core.models.action import ActionDescriptor, ActionInvocation, Receipt

logger = logging.getLogger(__name__)


class Dispatcher:
    """Executes ActionDescriptors against a session."""

    def __init__(self, session: SessionState, source: ParameterSource):
        self._session = session
        self._source = source

    @property
    def session(self) -> SessionState:
        return self._session

    @property
    def source(self) -> ParameterSource:
        return self._source

    def execute(self, action: ActionDescriptor) -> ActionInvocation:
        """Run ``action`` to a terminal state and return the invocation record."""
        audit = self._session.audit
        invocation = ActionInvocation(key=action.key, label=action.label)

        if action.handler is None:
            raise ValueError(f"Action {action.key} ({action.label}) has no handler")

        # ── Parameters ──────────────────────────────────────────
        try:
            invocation.params = collect(action.params, self._source)
        except ValidationError as e:
            return self._finish(invocation, "validation-error", f"Invalid input — {e.message}")

        # ── Gate ────────────────────────────────────────────────
        if action.requires_confirmation and not confirm(self._source):
            return self._finish(invocation, "user-cancelled", "Action cancelled.")

        # ── Invoke ──────────────────────────────────────────────
        audit.info(f"{action.label}...")
        try:
            receipts = action.handler(invocation.params, self._session)
        except ValidationError as e:
            return self._finish(invocation, "validation-error", f"Invalid input — {e.message}")
        except InstallError as e:
            return self._finish(invocation, "external-failure", f"{action.label} failed: {e}")

        invocation.receipts = list(receipts)
        for receipt in receipts:
            _show(receipt)

        failed = next((r for r in receipts if r.failed), None)
        if failed is not None:
            return self._finish(
                invocation,
                "external-failure",
                f"{action.label} failed: {failed.error or 'command failed'}",
            )

        return self._finish(invocation, "succeeded", _done_message(action, invocation.params))

    def _finish(self, invocation: ActionInvocation, outcome: str, message: str) -> ActionInvocation:
        invocation.outcome = outcome  # type: ignore[assignment]
        if outcome in ("succeeded", "user-cancelled"):
            self._session.audit.info(message)
        else:
            invocation.error = message
            self._session.audit.error(message)
        logger.debug("Action %s → %s", invocation.key, outcome)
        return invocation


def _done_message(action: ActionDescriptor, params: dict[str, Any]) -> str:
    if not action.done:
        return f"{action.label} completed successfully."
    try:
        return action.done.format(**params)
    except (KeyError, IndexError, ValueError):
        return action.done


def _show(receipt: Receipt) -> None:
    """Echo a tool's raw output to the operator."""
    if receipt.output:
        click.echo(receipt.output)
    if receipt.failed and receipt.error:
        click.secho(receipt.error, fg="red", err=True)
