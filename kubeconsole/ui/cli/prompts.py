"""
Interactive parameter source backed by click prompts.
"""

from __future__ import annotations

import click

from kubeconsole.core.engine.params import InputClosed, ParameterSource


class ClickSource(ParameterSource):
    """Reads answers from the terminal with ``click.prompt``.

    EOF and Ctrl-C surface as ``InputClosed`` so the command loop can
    shut down cleanly.
    """

    def ask(self, prompt: str, default: str | None = None) -> str:
        try:
            value = click.prompt(
                prompt,
                default=default if default is not None else "",
                show_default=bool(default),
            )
        except click.exceptions.Abort:
            raise InputClosed(prompt) from None
        return str(value)
