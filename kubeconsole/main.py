"""
kubeconsole — CLI entrypoint.

Usage:
    kubeconsole                 # pre-flight, then the interactive menu
    kubeconsole probe --json
    kubeconsole tools status
    kubeconsole --mock          # menu without touching the host
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from kubeconsole import __version__
from kubeconsole.core.observability.logging_config import setup_logging


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="kubeconsole")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to kubeconsole.yml (default: auto-detect).",
)
@click.option("--mock", is_flag=True, help="Record commands instead of running them.")
@click.option("--skip-preflight", is_flag=True, help="Do not probe the host before the menu.")
@click.option("--strict", is_flag=True, help="Abort pre-flight when required binaries are missing.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    mock: bool,
    skip_preflight: bool,
    strict: bool,
) -> None:
    """kubeconsole — operator console for a local Kubernetes sandbox."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["mock"] = mock
    ctx.obj["skip_preflight"] = skip_preflight
    ctx.obj["strict"] = strict
    ctx.obj["quiet"] = quiet

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = None

    setup_logging(level=level)

    if ctx.invoked_subcommand is None:
        ctx.invoke(menu)


# ── Session helpers ─────────────────────────────────────────────


def build_session(ctx: click.Context, *, echo: bool = True):
    """Load config and construct the SessionState for this process.

    ``echo=False`` keeps audit lines off stdout (machine-readable output).
    """
    from kubeconsole.adapters.mock import RecordingRunner
    from kubeconsole.adapters.shell.command import CommandRunner
    from kubeconsole.core.config.loader import ConfigError, load_config
    from kubeconsole.core.context import SessionState
    from kubeconsole.core.persistence.audit import AuditLog

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(2)

    if ctx.obj.get("mock"):
        runner = RecordingRunner(binaries=set(config.required_binaries), simulate=True)
    else:
        runner = CommandRunner(timeout=config.command_timeout)

    return SessionState.create(config, runner, audit=AuditLog(Path(config.log_file), echo=echo))


def preflight(ctx: click.Context, session) -> None:
    """Run the environment probe; exit non-zero on a fatal failure."""
    from kubeconsole.core.errors import EnvironmentProbeError
    from kubeconsole.core.services.installer import tool_status
    from kubeconsole.core.services.probe import probe

    try:
        probe(session, strict=ctx.obj.get("strict", False))
    except EnvironmentProbeError as e:
        click.secho(f"❌ Pre-flight failed: {e}", fg="red", err=True)
        session.close()
        sys.exit(1)

    for name, path in tool_status(session).items():
        session.audit.info(f"{name}: {path}" if path else f"{name}: not installed")


# ── Commands ────────────────────────────────────────────────────


@cli.command()
@click.pass_context
def menu(ctx: click.Context) -> None:
    """Run the interactive menu (default)."""
    from kubeconsole.core.engine.dispatcher import Dispatcher
    from kubeconsole.ui.cli.menu import CommandLoop
    from kubeconsole.ui.cli.prompts import ClickSource

    session = build_session(ctx)
    if not ctx.obj.get("skip_preflight"):
        preflight(ctx, session)

    if ctx.obj.get("mock"):
        click.secho("   Mode: mock (no real execution)", fg="yellow")

    try:
        CommandLoop(Dispatcher(session, ClickSource())).run()
    finally:
        session.close()

    click.echo("Console session complete.")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def probe(ctx: click.Context, as_json: bool) -> None:
    """Run the pre-flight environment checks and report."""
    from kubeconsole.core.errors import EnvironmentProbeError
    from kubeconsole.core.services.probe import probe as run_probe

    session = build_session(ctx, echo=not as_json)
    try:
        report = run_probe(session, strict=ctx.obj.get("strict", False))
    except EnvironmentProbeError as e:
        session.close()
        if as_json:
            click.echo(json.dumps({"ok": False, "reason": e.reason, "error": e.message}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
    session.close()

    if as_json:
        click.echo(json.dumps({"ok": True, **report.to_dict()}, indent=2))
        return

    distro = report.distro
    click.secho("\n🔍 Environment:", fg="cyan", bold=True)
    click.echo(f"   Distro:         {distro.pretty_name or distro.id} ({distro.family})")
    click.echo(f"   Network:        reachable ({report.network_endpoint})")
    click.echo(f"   Virtualization: {report.virtualization}")
    click.echo(f"   Privileged:     {'yes' if report.is_root else 'no'}")
    for name, path in report.binaries.items():
        if path:
            click.secho(f"   ✓ {name} ", fg="green", nl=False)
            click.echo(f"→ {path}")
        else:
            click.secho(f"   ✗ {name} (missing)", fg="red")
    click.echo()


@cli.command()
def catalog() -> None:
    """List every action the menu offers."""
    from kubeconsole.core.services.actions import CATALOG

    for entry in CATALOG:
        marker = " ⚠️" if entry.requires_confirmation else ""
        click.echo(f"{entry.key:>3}) {entry.label}{marker}")
        for child in entry.submenu:
            child_marker = " ⚠️" if child.requires_confirmation else ""
            click.echo(f"       {child.key}) {child.label}{child_marker}")


@cli.command("log")
@click.option("-n", "count", default=20, type=click.IntRange(min=1), help="Number of entries to show.")
@click.pass_context
def show_log(ctx: click.Context, count: int) -> None:
    """Show the most recent audit log entries."""
    from kubeconsole.core.config.loader import ConfigError, load_config
    from kubeconsole.core.persistence.audit import AuditLog

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(2)

    entries = AuditLog(Path(config.log_file), echo=False).read_recent(count)
    if not entries:
        click.echo(f"No audit entries in {config.log_file}")
        return
    for entry in entries:
        click.secho(entry.format(), fg="red" if entry.level == "error" else None)


# ── Register sub-command groups from kubeconsole/ui/cli/ ────────

from kubeconsole.ui.cli.tools import tools  # noqa: E402

cli.add_command(tools)


if __name__ == "__main__":
    cli()
