"""
implindex — merge independently generated trait-implementor fragments.

Fragments (one per documented trait) contribute package → implementor
entries to a single process-wide :class:`RegistryCoordinator`, in any order.
One consumer registers whenever it is ready and receives every entry exactly
once, buffered entries first, later ones as they arrive.

Usage:
    from implindex import contribute, register_consumer, signal_ready

    contribute({"nix": ["impl AsRawFd for PtyMaster"]})

    @register_consumer
    def render(view):
        for package, entries in view.delta.items():
            ...

    signal_ready()
"""

from implindex.coordinator import (
    CoordinatorState,
    RegistryCoordinator,
    RegistryView,
    contribute,
    get_coordinator,
    register_consumer,
    reset_coordinator,
    signal_ready,
)
from implindex.fragments import Fragment, dump_fragment, load_fragment, parse_fragment
from implindex.loader import LoadReport, load_directory
from implindex.merge import merge_contributions

__version__ = "0.1.0"

__all__ = [
    "CoordinatorState",
    "Fragment",
    "LoadReport",
    "RegistryCoordinator",
    "RegistryView",
    "contribute",
    "dump_fragment",
    "get_coordinator",
    "load_directory",
    "load_fragment",
    "merge_contributions",
    "parse_fragment",
    "register_consumer",
    "reset_coordinator",
    "signal_ready",
]
