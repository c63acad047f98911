"""
CLI: ``implindex load`` / ``implindex inspect`` — build and inspect the index.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape

from implindex.cli.utils import console, err_console, fail, print_json, print_registry
from implindex.coordinator import RegistryView, get_coordinator
from implindex.core.errors import ImplIndexError


class ConsoleConsumer:
    """Consumer that keeps the latest view for the CLI to print."""

    def __init__(self) -> None:
        self.view: RegistryView | None = None
        self.deliveries = 0

    def __call__(self, view: RegistryView) -> None:
        self.view = view
        self.deliveries += 1


def load(
    root: Path = typer.Argument(..., help="Directory holding the implementors fragment tree."),
    json_out: bool = typer.Option(False, "--json", help="Emit the registry and load report as JSON."),
    show_entries: bool = typer.Option(False, "--entries", "-e", help="List implementor text per package."),
    keys: list[str] | None = typer.Option(None, "--key", "-k", help="Only show these packages."),
    pattern: str | None = typer.Option(None, "--pattern", "-p", help="Fragment glob (default from settings)."),
) -> None:
    """Load every fragment under ROOT and print the merged index."""
    from implindex.loader import load_directory

    if not root.is_dir():
        err_console.print(f"[bold red]Error[/bold red]: {root} is not a directory")
        raise typer.Exit(code=1)

    coordinator = get_coordinator()
    consumer = ConsoleConsumer()
    try:
        coordinator.register_consumer(consumer)
    except ImplIndexError as exc:
        fail(exc)

    report = load_directory(root, coordinator, pattern=pattern)

    registry = (consumer.view or coordinator.view()).to_dict()
    if keys:
        registry = {key: entries for key, entries in registry.items() if key in keys}

    if json_out:
        print_json({"registry": registry, "report": report.to_dict()})
    else:
        print_registry(registry, title=f"Implementors ({len(report.loaded)} fragments)", show_entries=show_entries)
        for failure in report.failures:
            err_console.print(
                f"[bold red]Failed[/bold red] {escape(failure.name)}: {escape(failure.error.get('message', ''))}"
            )

    if not report.ok:
        raise typer.Exit(code=1)


def inspect(
    path: Path = typer.Argument(..., help="A single fragment file."),
    json_out: bool = typer.Option(False, "--json", help="Emit the fragment as JSON."),
    show_entries: bool = typer.Option(False, "--entries", "-e", help="List implementor text per package."),
) -> None:
    """Parse one fragment file without merging it."""
    from implindex.fragments import load_fragment

    try:
        fragment = load_fragment(path, path.parent)
    except ImplIndexError as exc:
        fail(exc)

    if json_out:
        print_json(
            {
                "name": fragment.name,
                "contribution": [
                    {"key": key, "entries": list(entries)} for key, entries in fragment.pairs
                ],
            }
        )
        return

    console.print(f"[bold]{escape(fragment.name)}[/bold]: {len(fragment.pairs)} packages, {fragment.entry_count} implementors")
    grouped: dict[str, list[str]] = {}
    for key, entries in fragment.pairs:
        grouped.setdefault(key, []).extend(entries)
    print_registry(grouped, show_entries=show_entries)
