"""
Confirmation gate — the one check in front of every state-mutating action.

Only an explicit ``y`` / ``yes`` proceeds.  Anything else, including an
empty answer, is a cancellation.  The gate is asked fresh on every
invocation.
"""

from __future__ import annotations

from kubeconsole.core.engine.params import ParameterSource

CONFIRM_PROMPT = "Are you sure you want to proceed? (y/n)"

_AFFIRMATIVE = frozenset({"y", "yes"})


def confirm(source: ParameterSource, prompt: str = CONFIRM_PROMPT) -> bool:
    """Read one answer; True only for an explicit affirmative."""
    answer = source.ask(prompt)
    return answer.strip().lower() in _AFFIRMATIVE
