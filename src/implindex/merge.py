"""Per-key append merge of implementor contributions.

A contribution maps a package key to the ordered entries that package
contributes. Merging is plain concatenation per key: existing keys keep their
entries and gain the new ones at the end, new keys are created. Concatenation
is associative, so pre-combining contributions never changes the result.

::

    normalize_contribution(value)   → [(key, (entry, ...)), ...] or InvalidContributionError
    merge_into(target, pairs)       → mutates target, returns the delta
    merge_contributions(*values)    → pure pre-combination

Tags:
    implindex, merge, contribution, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeAlias

from implindex.core.errors import InvalidContributionError

Key: TypeAlias = str
Entry: TypeAlias = str
Contribution: TypeAlias = Mapping[Key, Sequence[Entry]] | Iterable[tuple[Key, Sequence[Entry]]]
Pairs: TypeAlias = list[tuple[Key, tuple[Entry, ...]]]


def _check_entries(key: Key, entries: Any) -> tuple[Entry, ...]:
    if isinstance(entries, (str, bytes)) or not isinstance(entries, Sequence):
        raise InvalidContributionError(
            f"Entries for {key!r} must be a sequence of strings, got {type(entries).__name__}"
        ).with_context(key=key)
    for position, entry in enumerate(entries):
        if not isinstance(entry, str):
            raise InvalidContributionError(
                f"Entry {position} for {key!r} must be a string, got {type(entry).__name__}"
            ).with_context(key=key, position=position)
    return tuple(entries)


def normalize_contribution(value: Any) -> Pairs:
    """
    Validate a contribution and return it as ordered ``(key, entries)`` pairs.

    Accepts a mapping, or an iterable of ``(key, entries)`` pairs when a key
    needs to appear more than once. Repeated keys and empty entry sequences
    are legal. Nothing is merged until the whole value has been checked, so
    a rejected contribution leaves no trace.

    Raises:
        InvalidContributionError: if the value is not shaped like a contribution
    """
    if isinstance(value, Mapping):
        items: Iterable[Any] = value.items()
    elif isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise InvalidContributionError(
            f"Contribution must be a mapping of key to entries, got {type(value).__name__}"
        )
    else:
        items = value

    pairs: Pairs = []
    for item in items:
        if not isinstance(item, (tuple, list)) or len(item) != 2:
            raise InvalidContributionError(
                f"Contribution items must be (key, entries) pairs, got {item!r}"
            )
        key, entries = item
        if not isinstance(key, str):
            raise InvalidContributionError(
                f"Contribution keys must be strings, got {type(key).__name__}"
            ).with_context(key=repr(key))
        pairs.append((key, _check_entries(key, entries)))
    return pairs


def merge_into(target: dict[Key, list[Entry]], pairs: Pairs) -> dict[Key, list[Entry]]:
    """Append each pair's entries to ``target`` and return what was added, per key."""
    delta: dict[Key, list[Entry]] = {}
    for key, entries in pairs:
        target.setdefault(key, []).extend(entries)
        delta.setdefault(key, []).extend(entries)
    return delta


def merge_contributions(*contributions: Contribution) -> dict[Key, list[Entry]]:
    """Combine several contributions into one, in argument order."""
    combined: dict[Key, list[Entry]] = {}
    for contribution in contributions:
        merge_into(combined, normalize_contribution(contribution))
    return combined


def entry_count(registry: Mapping[Key, Sequence[Entry]]) -> int:
    """Total number of entries across all keys."""
    return sum(len(entries) for entries in registry.values())


__all__ = [
    "Contribution",
    "Entry",
    "Key",
    "entry_count",
    "merge_contributions",
    "merge_into",
    "normalize_contribution",
]
