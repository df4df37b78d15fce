"""CLI entrypoint for extblock."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from extblock.config import ClientSettings, load_settings
from extblock.errors import ConfigError
from extblock.report.jsonout import render_blocklist_json, render_selection_json
from extblock.report.text import render_blocklist
from extblock.session import BlocklistSession
from extblock.store.client import ExtensionStoreClient
from extblock.store.mirror import SelectionMirror

EXIT_OK = 0
EXIT_OPERATIONAL_ERROR = 1
EXIT_REJECTED = 2

app = typer.Typer(help="extblock: manage a file-extension blocklist.")
mirror_app = typer.Typer(help="Local selection mirror diagnostics.")
console = Console()


@app.callback()
def root(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", help="Path to YAML settings (default: XDG config path)."
    ),
    api_url: str | None = typer.Option(
        None, "--api-url", help="Base URL of the extension store API."
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Per-request timeout in seconds."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Resolve settings shared by every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        ctx.obj = load_settings(config, api_url=api_url, timeout_seconds=timeout)
    except ConfigError as exc:
        console.print(f"[red]Operational error: {escape(str(exc))}[/red]")
        raise typer.Exit(code=EXIT_OPERATIONAL_ERROR) from exc


@app.command("status")
def status(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Emit JSON state to stdout."),
) -> None:
    """Show fixed and custom blocked extensions."""
    session = _load_session(ctx.obj)
    _emit(session, json_output=json_output)
    raise typer.Exit(code=EXIT_OK)


@app.command("add")
def add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Custom extension name (max 20 characters)."),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON state to stdout."),
) -> None:
    """Block a custom extension."""
    session = _load_session(ctx.obj)
    session.pending_input = name
    succeeded = session.submit_pending()
    _emit(session, json_output=json_output)
    raise typer.Exit(code=EXIT_OK if succeeded else EXIT_REJECTED)


@app.command("remove")
def remove(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Custom extension id or name."),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON state to stdout."),
) -> None:
    """Unblock a custom extension."""
    session = _load_session(ctx.obj)
    record = session.find_custom(target)
    if record is None:
        console.print(
            f"[red]Operational error: no custom extension matches '{escape(target)}'.[/red]"
        )
        raise typer.Exit(code=EXIT_OPERATIONAL_ERROR)

    succeeded = session.remove_extension(record)
    _emit(session, json_output=json_output)
    raise typer.Exit(code=EXIT_OK if succeeded else EXIT_REJECTED)


@app.command("toggle")
def toggle(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Fixed extension name."),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON state to stdout."),
) -> None:
    """Flip the blocked state of a fixed extension."""
    session = _load_session(ctx.obj)
    if session.find_fixed(name) is None:
        console.print(f"[red]Operational error: '{escape(name)}' is not a fixed extension.[/red]")
        raise typer.Exit(code=EXIT_OPERATIONAL_ERROR)

    succeeded = session.toggle_fixed(name)
    _emit(session, json_output=json_output)
    raise typer.Exit(code=EXIT_OK if succeeded else EXIT_REJECTED)


@mirror_app.command("show")
def mirror_show(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Emit mirrored map as JSON."),
) -> None:
    """Print the last mirrored selection map."""
    settings: ClientSettings = ctx.obj
    if settings.mirror_path is None:
        console.print("[yellow]Selection mirror is disabled.[/yellow]")
        raise typer.Exit(code=EXIT_OPERATIONAL_ERROR)

    selection = SelectionMirror(settings.mirror_path).read()
    if selection is None:
        console.print(f"No mirrored selection at {settings.mirror_path}")
        raise typer.Exit(code=EXIT_OK)

    if json_output:
        typer.echo(render_selection_json(selection))
        raise typer.Exit(code=EXIT_OK)

    table = Table(title=f"Mirrored Selection ({settings.mirror_path})")
    table.add_column("Extension")
    table.add_column("Blocked", justify="center")
    for name, blocked in sorted(selection.items()):
        table.add_row(escape(name), "yes" if blocked else "no")
    console.print(table)
    raise typer.Exit(code=EXIT_OK)


app.add_typer(mirror_app, name="mirror")


def _load_session(settings: ClientSettings) -> BlocklistSession:
    client = ExtensionStoreClient(settings.api_url, timeout_seconds=settings.timeout_seconds)
    mirror = SelectionMirror(settings.mirror_path) if settings.mirror_path is not None else None
    session = BlocklistSession(
        client,
        mirror=mirror,
        rollback_failed_toggle=settings.rollback_failed_toggle,
    )
    if not session.refresh():
        load_error = escape(session.last_load_error or "unknown error")
        console.print(f"[red]Operational error: unable to load extensions: {load_error}[/red]")
        raise typer.Exit(code=EXIT_OPERATIONAL_ERROR)
    return session


def _emit(session: BlocklistSession, *, json_output: bool) -> None:
    state = session.snapshot()
    if json_output:
        typer.echo(render_blocklist_json(state))
    else:
        render_blocklist(console, state)
