"""Implementor fragments and their on-disk script format.

A fragment is what the documentation build emits for one documented trait:
a self-executing script that builds a literal ``implementors`` object and
hands it to the page's registration hook, or parks it in
``window.pending_implementors`` when the hook does not exist yet::

    (function() {var implementors = {
    "nix":[["impl AsRawFd for PtyMaster"],["impl AsRawFd for PollFd"]],
    "same_file":[["impl AsRawFd for Handle"]]
    };if (window.register_implementors) {window.register_implementors(implementors);} else {window.pending_implementors = implementors;}})()

In Python a fragment is an immutable :class:`Fragment` whose
:meth:`Fragment.execute` makes the single ``contribute`` call the script
would make. Entry arrays are unwrapped to their rendered text; the trailing
``synthetic``/``types`` members newer builds append are not part of an entry.

Tags:
    implindex, fragments, codec, rustdoc

Doc-Types:
    api-reference
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from implindex.coordinator import RegistryCoordinator, get_coordinator
from implindex.core.errors import FragmentFormatError, InvalidContributionError
from implindex.merge import Contribution, Entry, Key, normalize_contribution

_FRAGMENT_RE = re.compile(
    r"var\s+implementors\s*=\s*(?P<body>\{.*\})\s*;\s*if\s*\(\s*window\.register_implementors\s*\)",
    re.DOTALL,
)

_SCRIPT_TEMPLATE = (
    "(function() {{var implementors = {body};"
    "if (window.register_implementors) {{window.register_implementors(implementors);}} "
    "else {{window.pending_implementors = implementors;}}}})()"
)


@dataclass(frozen=True)
class Fragment:
    """One documented item's contribution, as built."""

    name: str
    pairs: tuple[tuple[Key, tuple[Entry, ...]], ...] = ()

    @classmethod
    def from_contribution(cls, name: str, contribution: Contribution) -> Fragment:
        """Build a fragment from a mapping (or pairs) of key to entries."""
        pairs = normalize_contribution(contribution)
        return cls(name=name, pairs=tuple(pairs))

    @property
    def keys(self) -> list[Key]:
        return [key for key, _ in self.pairs]

    @property
    def entry_count(self) -> int:
        return sum(len(entries) for _, entries in self.pairs)

    def contribution(self) -> list[tuple[Key, list[Entry]]]:
        """A fresh copy of the contribution, safe to hand over."""
        return [(key, list(entries)) for key, entries in self.pairs]

    def execute(self, coordinator: RegistryCoordinator | None = None) -> None:
        """Hand the contribution to the coordinator, exactly once per call."""
        target = coordinator if coordinator is not None else get_coordinator()
        try:
            target.contribute(self.contribution())
        except InvalidContributionError as exc:
            raise exc.with_context(fragment=self.name)


class _Pairs(list):
    """JSON object decoded as ordered pairs, repeated keys kept."""


def _entry_text(key: str, raw: Any) -> Entry:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list) and raw and isinstance(raw[0], str):
        return raw[0]
    raise FragmentFormatError(
        f"Unrecognised entry for {key!r}: expected a string or [text, ...], got {raw!r}"
    ).with_context(key=key)


def parse_fragment(text: str, *, name: str = "<fragment>") -> Fragment:
    """
    Decode an implementors script into a :class:`Fragment`.

    Raises:
        FragmentFormatError: the text is not an implementors script, or its
            object literal is not valid JSON of the expected shape
    """
    match = _FRAGMENT_RE.search(text)
    if match is None:
        raise FragmentFormatError(
            "No 'var implementors = {...};if (window.register_implementors)' block found"
        ).with_context(fragment=name)

    try:
        decoded = json.loads(match.group("body"), object_pairs_hook=_Pairs)
    except json.JSONDecodeError as exc:
        raise FragmentFormatError(
            f"Implementors object is not valid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})",
            cause=exc,
        ).with_context(fragment=name) from exc

    pairs: list[tuple[Key, tuple[Entry, ...]]] = []
    for key, raw_entries in decoded:
        if not isinstance(raw_entries, list):
            raise FragmentFormatError(
                f"Entries for {key!r} must be an array"
            ).with_context(fragment=name, key=key)
        try:
            entries = tuple(_entry_text(key, raw) for raw in raw_entries)
        except FragmentFormatError as exc:
            raise exc.with_context(fragment=name)
        pairs.append((key, entries))
    return Fragment(name=name, pairs=tuple(pairs))


def dump_fragment(fragment: Fragment) -> str:
    """Encode a fragment in the script shape :func:`parse_fragment` reads."""
    lines = [
        f"{json.dumps(key, ensure_ascii=False)}:"
        f"{json.dumps([[entry] for entry in entries], ensure_ascii=False, separators=(',', ':'))}"
        for key, entries in fragment.pairs
    ]
    body = "{\n" + ",\n".join(lines) + "\n}"
    return _SCRIPT_TEMPLATE.format(body=body)


def fragment_name(path: Path, root: Path | None = None) -> str:
    """``implementors/core/marker/trait.Copy.js`` → ``core/marker/trait.Copy`` under root."""
    relative = path.relative_to(root) if root is not None else Path(path.name)
    return relative.with_suffix("").as_posix()


def load_fragment(path: Path | str, root: Path | str | None = None) -> Fragment:
    """Read and parse one fragment file."""
    path = Path(path)
    name = fragment_name(path, Path(root) if root is not None else None)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FragmentFormatError(f"Cannot read fragment: {exc}", cause=exc).with_context(
            fragment=name, path=str(path)
        ) from exc
    try:
        return parse_fragment(text, name=name)
    except FragmentFormatError as exc:
        raise exc.with_context(path=str(path))


__all__ = [
    "Fragment",
    "dump_fragment",
    "fragment_name",
    "load_fragment",
    "parse_fragment",
]
