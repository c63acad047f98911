"""Load a directory of implementor fragments into a coordinator.

Stands in for the browser: every fragment file under a root is executed
once, in sorted path order, then the ready signal fires. A fragment that
cannot be read, parsed, or merged is recorded in the :class:`LoadReport` and
skipped; the fragments after it still merge normally.

Tags:
    implindex, loader, fragments, discovery

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from implindex.coordinator import RegistryCoordinator, get_coordinator
from implindex.core.errors import ConsumerDeliveryError, ImplIndexError
from implindex.core.logging import LogContext, get_logger
from implindex.core.settings import get_settings
from implindex.fragments import fragment_name, load_fragment

logger = get_logger(__name__)


@dataclass
class FragmentFailure:
    name: str
    path: str | None
    error: dict[str, Any]


@dataclass
class LoadReport:
    """What happened while loading one root."""

    root: str
    loaded: list[str] = field(default_factory=list)
    failures: list[FragmentFailure] = field(default_factory=list)
    entries: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "loaded": list(self.loaded),
            "entries": self.entries,
            "failures": [
                {"name": failure.name, "path": failure.path, "error": failure.error}
                for failure in self.failures
            ],
        }


def discover_fragments(root: Path | str, pattern: str | None = None) -> list[Path]:
    """Fragment files under ``root`` matching ``pattern``, sorted by path."""
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Fragment root {root} is not a directory")
    pattern = pattern or get_settings().fragment_pattern
    return sorted(path for path in root.glob(pattern) if path.is_file())


def load_directory(
    root: Path | str,
    coordinator: RegistryCoordinator | None = None,
    *,
    pattern: str | None = None,
    ready: bool = True,
) -> LoadReport:
    """
    Execute every fragment under ``root`` against ``coordinator``.

    Args:
        root: Directory holding the fragment tree (fragment names are relative to it)
        coordinator: Target coordinator (process-wide one if None)
        pattern: Glob overriding ``IMPLINDEX_FRAGMENT_PATTERN``
        ready: Fire ``signal_ready`` once every fragment has run

    Returns:
        LoadReport with loaded fragment names, merged entry count and failures
    """
    root = Path(root)
    target = coordinator if coordinator is not None else get_coordinator()
    report = LoadReport(root=str(root))

    paths = discover_fragments(root, pattern)
    logger.info("fragment_discovery", root=str(root), fragments=len(paths))

    for path in paths:
        name = fragment_name(path, root)
        with LogContext(fragment=name):
            try:
                fragment = load_fragment(path, root)
                fragment.execute(target)
            except ConsumerDeliveryError as exc:
                # merged, but the consumer choked on it
                report.loaded.append(name)
                report.entries += fragment.entry_count
                report.failures.append(FragmentFailure(name, str(path), exc.to_dict()))
                continue
            except ImplIndexError as exc:
                logger.warning("fragment_failed", fragment=name, path=str(path), **exc.to_dict())
                report.failures.append(FragmentFailure(name, str(path), exc.to_dict()))
                continue
            report.loaded.append(name)
            report.entries += fragment.entry_count
            logger.debug("fragment_loaded", fragment=name, keys=len(fragment.keys), entries=fragment.entry_count)

    if ready:
        try:
            target.signal_ready()
        except ConsumerDeliveryError as exc:
            report.failures.append(FragmentFailure("<ready>", None, exc.to_dict()))

    logger.info(
        "fragments_loaded",
        root=str(root),
        loaded=len(report.loaded),
        failed=len(report.failures),
        entries=report.entries,
    )
    return report


__all__ = [
    "FragmentFailure",
    "LoadReport",
    "discover_fragments",
    "load_directory",
]
