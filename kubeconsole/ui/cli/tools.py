"""
CLI commands for tool management.

Thin wrappers that run installer operations through the same
confirmation + audit path as the menu.
"""

from __future__ import annotations

import json
import sys

import click

from kubeconsole.core.models.action import ActionDescriptor


@click.group("tools")
def tools() -> None:
    """Tools — install, remove, and update kubectl / minikube / curl."""


def _known_tool(name: str) -> str:
    from kubeconsole.core.services.recipes import DEFAULT_TOOLS

    if name not in DEFAULT_TOOLS:
        raise click.ClickException(f"Unknown tool '{name}' (known: {', '.join(sorted(DEFAULT_TOOLS))})")
    return name


def _run_gated(ctx: click.Context, action: ActionDescriptor) -> None:
    from kubeconsole.core.engine.dispatcher import Dispatcher
    from kubeconsole.main import build_session, preflight
    from kubeconsole.ui.cli.prompts import ClickSource

    session = build_session(ctx)
    try:
        if not ctx.obj.get("skip_preflight"):
            preflight(ctx, session)
        invocation = Dispatcher(session, ClickSource()).execute(action)
    finally:
        session.close()

    if invocation.outcome in ("external-failure", "validation-error"):
        sys.exit(1)


@tools.command("status")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show which tools are installed."""
    from kubeconsole.core.services.installer import tool_status
    from kubeconsole.main import build_session

    session = build_session(ctx)
    result = tool_status(session)

    if as_json:
        click.echo(json.dumps(result, indent=2))
        return

    click.secho("🔧 Tools:", fg="cyan", bold=True)
    for name, path in result.items():
        spec = session.tools[name]
        pinned = f" (pinned {spec.version})" if spec.version and spec.version != "latest" else ""
        if path:
            click.secho(f"   ✓ {name}", fg="green", nl=False)
            click.echo(f"  → {path}{pinned}")
        else:
            click.secho(f"   ✗ {name}", fg="yellow", nl=False)
            click.echo(f"  not installed{pinned}")


@tools.command("install")
@click.argument("name")
@click.pass_context
def install(ctx: click.Context, name: str) -> None:
    """Install a tool if it is not already present."""
    from kubeconsole.core.services.actions import install_tool

    name = _known_tool(name)
    _run_gated(ctx, ActionDescriptor(
        key=f"install-{name}", label=f"Install {name}", destructive=True,
        handler=install_tool(name),
    ))


@tools.command("uninstall")
@click.argument("name")
@click.pass_context
def uninstall(ctx: click.Context, name: str) -> None:
    """Remove an installed tool."""
    from kubeconsole.core.services.actions import uninstall_tool

    name = _known_tool(name)
    _run_gated(ctx, ActionDescriptor(
        key=f"uninstall-{name}", label=f"Uninstall {name}", destructive=True,
        handler=uninstall_tool(name),
    ))


@tools.command("update")
@click.pass_context
def update(ctx: click.Context) -> None:
    """Re-resolve versions and reinstall kubectl and minikube."""
    from kubeconsole.core.services.actions import find

    action = find("18")
    if action is None:
        raise click.ClickException("Update action missing from catalog")
    _run_gated(ctx, action)
