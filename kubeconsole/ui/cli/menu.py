"""
Command loop — render the catalog, read a selection, dispatch, repeat.

The loop ends only on the exit entry or when input closes.  An
unrecognised selection is one informational audit entry and a re-render,
never an error.
"""

from __future__ import annotations

import logging

import click

from kubeconsole.core.engine.dispatcher import Dispatcher
from kubeconsole.core.engine.params import InputClosed
from kubeconsole.core.models.action import ActionDescriptor
from kubeconsole.core.services.actions import CATALOG, find

logger = logging.getLogger(__name__)

SELECT_PROMPT = "Choose an option"


def render(entries: tuple[ActionDescriptor, ...], title: str | None = None) -> None:
    if title:
        click.secho(title, fg="cyan", bold=True)
    for entry in entries:
        click.echo(f"{entry.key}) {entry.label}")


class CommandLoop:
    """The interactive menu.

    Invocations are not kept once dispatched; the audit log is the only
    record.  ``renders`` counts how many times the menu was drawn.
    """

    def __init__(self, dispatcher: Dispatcher, catalog: tuple[ActionDescriptor, ...] = CATALOG):
        self._dispatcher = dispatcher
        self._catalog = catalog
        self.renders = 0

    def run(self) -> None:
        audit = self._dispatcher.session.audit
        source = self._dispatcher.source

        while True:
            render(self._catalog)
            self.renders += 1
            try:
                choice = source.ask(SELECT_PROMPT)
            except InputClosed:
                click.echo()
                audit.info("Input closed. Exiting...")
                return

            entry = find(choice, self._catalog)
            if entry is None:
                audit.info(f"Invalid option '{choice.strip()}'. Please try again.")
                continue

            if entry.exit:
                click.echo("Exiting...")
                return

            try:
                self._select(entry)
            except InputClosed:
                click.echo()
                audit.info("Input closed. Exiting...")
                return

    def _select(self, entry: ActionDescriptor) -> None:
        if entry.is_submenu:
            render(entry.submenu, title=entry.label)
            sub_choice = self._dispatcher.source.ask(SELECT_PROMPT)
            child = entry.child(sub_choice.strip())
            if child is None:
                self._dispatcher.session.audit.info(
                    f"Invalid option '{sub_choice.strip()}'. Please try again.",
                )
                return
            entry = child

        self._dispatcher.execute(entry)
