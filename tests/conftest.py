"""
Shared pytest fixtures and configuration for implindex tests.

This module provides:
- Process-wide coordinator / settings cleanup for test isolation
- Real-shaped implementors fragment scripts
- A temporary fragment tree laid out like a documentation build
"""

import os
import sys
from pathlib import Path

import pytest
import structlog

# Ensure implindex is importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from implindex.coordinator import reset_coordinator
from implindex.core.logging import clear_context
from implindex.core.settings import clear_settings_cache


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    """Fresh coordinator, settings, logging config and log context for every test."""
    for name in list(os.environ):
        if name.startswith("IMPLINDEX_"):
            monkeypatch.delenv(name)
    reset_coordinator()
    clear_settings_cache()
    structlog.reset_defaults()
    clear_context()
    yield
    reset_coordinator()
    clear_settings_cache()
    structlog.reset_defaults()
    clear_context()


# =============================================================================
# Fragment Fixtures
# =============================================================================

_TAIL = (
    "};if (window.register_implementors) {window.register_implementors(implementors);} "
    "else {window.pending_implementors = implementors;}})()"
)

AS_RAW_FD_JS = (
    "(function() {var implementors = {\n"
    '"nix":[["impl <a class=\\"trait\\" href=\\"https://doc.rust-lang.org/nightly/std/os/fd/raw/trait.AsRawFd.html\\" '
    'title=\\"trait std::os::fd::raw::AsRawFd\\">AsRawFd</a> for <a class=\\"struct\\" href=\\"nix/pty/struct.PtyMaster.html\\" '
    'title=\\"struct nix::pty::PtyMaster\\">PtyMaster</a>"],'
    '["impl <a class=\\"trait\\" href=\\"trait.AsRawFd.html\\">AsRawFd</a> for <a class=\\"struct\\" href=\\"nix/sys/signalfd/struct.SignalFd.html\\">SignalFd</a>"],'
    '["impl <a class=\\"trait\\" href=\\"trait.AsRawFd.html\\">AsRawFd</a> for <a class=\\"struct\\" href=\\"nix/poll/struct.PollFd.html\\">PollFd</a>"]],\n'
    '"rustix":[["impl&lt;\'context, T: <a class=\\"trait\\" href=\\"rustix/fd/trait.AsFd.html\\">AsFd</a>&gt; '
    '<a class=\\"trait\\" href=\\"rustix/fd/trait.AsRawFd.html\\">AsRawFd</a> for <a class=\\"struct\\" '
    'href=\\"rustix/io/epoll/struct.Epoll.html\\">Epoll</a>&lt;T&gt;"]],\n'
    '"same_file":[["impl <a class=\\"trait\\" href=\\"trait.AsRawFd.html\\">AsRawFd</a> for <a class=\\"struct\\" '
    'href=\\"same_file/struct.Handle.html\\">Handle</a>"]]\n' + _TAIL
)

INTO_ITERATOR_JS = (
    "(function() {var implementors = {\n"
    '"intaglio":[["impl&lt;\'a&gt; <a class=\\"trait\\" href=\\"trait.IntoIterator.html\\">IntoIterator</a> for &amp;\'a '
    '<a class=\\"struct\\" href=\\"intaglio/struct.SymbolTable.html\\">SymbolTable</a>"],'
    '["impl&lt;\'a&gt; <a class=\\"trait\\" href=\\"trait.IntoIterator.html\\">IntoIterator</a> for &amp;\'a '
    '<a class=\\"struct\\" href=\\"intaglio/bytes/struct.SymbolTable.html\\">SymbolTable</a>"]],\n'
    '"nix":[["impl <a class=\\"trait\\" href=\\"trait.IntoIterator.html\\">IntoIterator</a> for '
    '<a class=\\"struct\\" href=\\"nix/sys/signal/struct.SigSet.html\\">SigSet</a>",false,[]]]\n' + _TAIL
)


@pytest.fixture
def as_raw_fd_js() -> str:
    return AS_RAW_FD_JS


@pytest.fixture
def into_iterator_js() -> str:
    return INTO_ITERATOR_JS


@pytest.fixture
def fragment_tree(tmp_path: Path) -> Path:
    """``implementors/`` tree with two fragments, as a documentation build lays it out."""
    root = tmp_path / "implementors"
    as_raw_fd = root / "std" / "os" / "fd" / "raw" / "trait.AsRawFd.js"
    into_iterator = root / "core" / "iter" / "traits" / "collect" / "trait.IntoIterator.js"
    for path, text in ((as_raw_fd, AS_RAW_FD_JS), (into_iterator, INTO_ITERATOR_JS)):
        path.parent.mkdir(parents=True)
        path.write_text(text, encoding="utf-8")
    return root
