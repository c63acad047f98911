"""
Root Typer application for the implindex CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from implindex.cli.config import app as config_app
from implindex.cli.index import inspect, load
from implindex.cli.utils import fail
from implindex.core.errors import ConfigError

app = Typer(
    name="implindex",
    help="implindex — merge trait-implementor fragments into one index.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from implindex import __version__

        typer.echo(f"implindex {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """implindex CLI — load, inspect, and configure the implementors index."""
    from implindex.core.logging import configure_logging
    from implindex.core.settings import get_settings

    try:
        settings = get_settings()
    except ConfigError as exc:
        fail(exc)
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.json_logs(),
    )


# ── Commands ─────────────────────────────────────────────────────────────

app.command("load")(load)
app.command("inspect")(inspect)
app.add_typer(config_app, name="config", help="Configuration inspection.")
