"""Rich text rendering for blocklist state."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from extblock.models import BlocklistState


def render_blocklist(console: Console, state: BlocklistState) -> None:
    """Render fixed toggles, custom tags, the counter, and any error banner."""
    if state.error:
        console.print(f"[red]Error: {escape(state.error)}[/red]")
    if state.last_load_error:
        console.print(f"[yellow]Catalog may be stale: {escape(state.last_load_error)}[/yellow]")

    fixed_table = Table(title="Fixed Extensions")
    fixed_table.add_column("Blocked", justify="center")
    fixed_table.add_column("Extension")
    for entry in state.fixed:
        fixed_table.add_row(escape("[x]" if entry.blocked else "[ ]"), escape(entry.name))
    console.print(fixed_table)

    custom_table = Table(title="Custom Extensions")
    custom_table.add_column("ID", justify="right")
    custom_table.add_column("Extension")
    for extension in state.custom:
        custom_table.add_row(escape(str(extension.id)), escape(extension.name))
    console.print(custom_table)

    console.print(f"Custom extensions: {state.custom_count}/{state.max_custom}")
