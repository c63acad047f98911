"""
CLI layer for implindex.

Provides a Typer application that loads fragment trees and single fragment
files into the coordinator and prints the merged index. All merge logic
lives in ``implindex.coordinator``; this package handles only terminal
transport: argument parsing, coloured output, and table formatting.

Entry point::

    implindex --help
"""

from implindex.cli.app import app

__all__ = ["app"]
