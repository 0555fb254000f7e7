"""
Parameter collection — where operator input comes from, and how it is
checked before any external call.

``ParameterSource`` is the only way the engine reads input.  The
interactive console uses a click-backed source (ui/cli/prompts.py);
tests and scripted runs use ``ScriptedSource``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from kubeconsole.core.errors import ValidationError
from kubeconsole.core.models.action import ParamSpec


class InputClosed(Exception):
    """The operator's input stream ended (EOF / Ctrl-C)."""


class ParameterSource(ABC):
    """Supplies raw answers to prompts."""

    @abstractmethod
    def ask(self, prompt: str, default: str | None = None) -> str:
        """Return the operator's answer to ``prompt``.

        Raises:
            InputClosed: No more input is available.
        """


class ScriptedSource(ParameterSource):
    """Answers prompts from a fixed script, in order."""

    def __init__(self, answers: Iterable[str]):
        self._answers = list(answers)
        self.prompts: list[str] = []

    @property
    def remaining(self) -> int:
        return len(self._answers)

    def ask(self, prompt: str, default: str | None = None) -> str:
        self.prompts.append(prompt)
        if not self._answers:
            raise InputClosed(prompt)
        answer = self._answers.pop(0)
        if answer == "" and default is not None:
            return default
        return answer


def coerce(spec: ParamSpec, raw: str) -> Any:
    """Validate and convert one raw answer.

    Raises:
        ValidationError: If the answer fails the parameter's precondition.
    """
    value = raw.strip()

    if not value:
        if spec.default is not None:
            value = spec.default
        elif not spec.required:
            return None
        else:
            raise ValidationError(spec.name, "must not be empty")

    if spec.kind == "text":
        return value

    if spec.kind in ("positive_int", "non_negative_int"):
        try:
            number = int(value)
        except ValueError:
            raise ValidationError(spec.name, f"'{value}' is not an integer") from None
        if spec.kind == "positive_int" and number < 1:
            raise ValidationError(spec.name, f"must be a positive integer, got {number}")
        if number < 0:
            raise ValidationError(spec.name, f"must be a non-negative integer, got {number}")
        return number

    if spec.kind == "choice":
        if value not in spec.choices:
            raise ValidationError(
                spec.name, f"'{value}' is not one of: {', '.join(spec.choices)}",
            )
        return value

    raise ValidationError(spec.name, f"unknown parameter kind '{spec.kind}'")


def prompt_text(spec: ParamSpec) -> str:
    """Prompt line for a parameter, with choices appended."""
    if spec.kind == "choice" and spec.choices:
        return f"{spec.prompt} ({', '.join(spec.choices)})"
    return spec.prompt


def collect(specs: Iterable[ParamSpec], source: ParameterSource) -> dict[str, Any]:
    """Ask for and validate every parameter, stopping at the first bad one."""
    values: dict[str, Any] = {}
    for spec in specs:
        raw = source.ask(prompt_text(spec), default=spec.default)
        values[spec.name] = coerce(spec, raw)
    return values
