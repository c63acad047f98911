"""
CLI utility helpers — output formatting.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, NoReturn

import typer
from bs4 import BeautifulSoup
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from implindex.core.errors import ImplIndexError

console = Console()
err_console = Console(stderr=True)

def strip_markup(entry: str) -> str:
    """Rendered entry → plain text (``impl<'a> IntoIterator for &'a Registry``)."""
    return BeautifulSoup(entry, "html.parser").get_text()


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_registry(
    registry: Mapping[str, Sequence[str]],
    *,
    title: str = "",
    show_entries: bool = False,
) -> None:
    """Render a key → entries mapping as a table, optionally with entry text."""
    if not registry:
        console.print("[dim]No implementors.[/dim]")
        return

    table = Table(title=title or None, pad_edge=False)
    table.add_column("Package", style="cyan")
    table.add_column("Implementors", justify="right")
    for key, entries in registry.items():
        table.add_row(escape(key), str(len(entries)))
    console.print(table)

    if show_entries:
        for key, entries in registry.items():
            console.print(f"\n[bold]{escape(key)}[/bold]")
            for entry in entries:
                console.print(f"  {strip_markup(entry)}", markup=False, highlight=False, soft_wrap=True)


def fail(error: ImplIndexError) -> NoReturn:
    """Print an implindex error and exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}")
    raise typer.Exit(code=1)
