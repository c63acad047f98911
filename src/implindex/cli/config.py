"""
CLI: ``implindex config`` — configuration inspection.
"""

from __future__ import annotations

import typer

from implindex.cli.utils import console, fail
from implindex.core.errors import ConfigError

app = typer.Typer(no_args_is_help=True)


@app.callback()
def config() -> None:
    """Inspect implindex settings (IMPLINDEX_* environment, .env)."""


@app.command("show")
def show_config(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show current configuration."""
    from implindex.core.settings import get_settings

    try:
        settings = get_settings()
    except ConfigError as exc:
        fail(exc)

    if format == "json":
        console.print_json(settings.model_dump_json())
        return

    values = settings.model_dump(mode="json")

    if format == "env":
        for key, value in sorted(values.items()):
            console.print(f"IMPLINDEX_{key.upper()}={value}", markup=False, highlight=False)
        return

    from rich.table import Table

    table = Table(title="Settings")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in sorted(values.items()):
        table.add_row(key, str(value))
    console.print(table)
