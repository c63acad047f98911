"""Registry Coordinator — process-wide rendezvous for implementor fragments.

Manifesto:
Implementor fragments are generated one per documented trait and executed
in whatever order the host loads them. The consumer that renders the index
initialises on its own schedule. The coordinator is the only thing both
sides know about: fragments hand it their contributions, the consumer
registers once, and every entry reaches the consumer exactly once, in its
original order, no matter who arrived first.

ARCHITECTURE
────────────
::

    RegistryCoordinator
      ├── .contribute(contribution)     ─ validate, merge, forward if active
      ├── .register_consumer(consumer)  ─ one-shot observer handoff
      ├── .signal_ready()               ─ page-lifecycle trigger
      └── .view() / .snapshot()         ─ read the merged registry

    State machine:

      UNINITIALIZED ──register_consumer──▶ ACTIVE  (for the coordinator's lifetime)
        │ contributions buffered            │ contributions merged and forwarded
        ▼                                   ▼
      pending buffer ──handed off once──▶ consumer(view)

    get_coordinator()     ─ module-level singleton
    reset_coordinator()   ─ discard it (for testing)

Delivery happens in three situations:

- ``register_consumer`` when something was already contributed, or the ready
  signal already fired (possibly delivering an empty registry);
- ``signal_ready`` when a consumer is waiting for its first delivery;
- ``contribute`` once a consumer is registered.

Each delivery passes a :class:`RegistryView` over the full registry whose
``delta`` holds only what is new since the previous delivery. Merges are
committed before delivery is attempted, so a failing consumer never costs a
contribution its place in the registry.

BEST PRACTICES
──────────────
- Pass an explicit ``RegistryCoordinator`` in tests; call
  ``reset_coordinator()`` in fixtures when using the global one.
- The second-consumer policy comes from ``IMPLINDEX_DUPLICATE_CONSUMER``
  (``reject`` by default).

Tags:
    implindex, coordinator, registry, observer, buffering

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from implindex.core.errors import (
    ConsumerDeliveryError,
    DuplicateConsumerError,
    InvalidConsumerError,
    InvalidContributionError,
)
from implindex.core.logging import get_logger
from implindex.core.settings import ConsumerPolicy, get_settings
from implindex.merge import Contribution, Entry, Key, entry_count, merge_into, normalize_contribution

logger = get_logger(__name__)

Consumer = Callable[["RegistryView"], Any]


class CoordinatorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"


class RegistryView(Mapping[Key, tuple[Entry, ...]]):
    """Read-only window onto the live registry.

    Lookups always reflect the current merged state, so a view kept by a
    consumer keeps seeing later merges. ``delta`` is fixed at delivery time.
    """

    def __init__(
        self,
        registry: dict[Key, list[Entry]],
        delta: Mapping[Key, list[Entry]] | None = None,
    ) -> None:
        self._registry = registry
        self._delta = MappingProxyType({key: tuple(entries) for key, entries in (delta or {}).items()})

    def __getitem__(self, key: Key) -> tuple[Entry, ...]:
        return tuple(self._registry[key])

    def __iter__(self) -> Iterator[Key]:
        return iter(list(self._registry))

    def __len__(self) -> int:
        return len(self._registry)

    @property
    def delta(self) -> Mapping[Key, tuple[Entry, ...]]:
        """Entries added since the previous delivery to this consumer."""
        return self._delta

    def entry_count(self) -> int:
        return entry_count(self._registry)

    def to_dict(self) -> dict[Key, list[Entry]]:
        """Detached copy of the full registry."""
        return {key: list(entries) for key, entries in self._registry.items()}

    def __repr__(self) -> str:
        return f"RegistryView(keys={len(self)}, entries={self.entry_count()}, delta_keys={len(self._delta)})"


class RegistryCoordinator:
    """Merges contributions and hands them to exactly one consumer.

    Example:
        coordinator = RegistryCoordinator()
        coordinator.contribute({"pkgA": ["impl X for Y"]})
        coordinator.contribute({"pkgA": ["impl Z for W"]})
        seen = []
        coordinator.register_consumer(lambda view: seen.append(view.to_dict()))
        # seen == [{"pkgA": ["impl X for Y", "impl Z for W"]}]
    """

    def __init__(self, *, duplicate_consumer: ConsumerPolicy = ConsumerPolicy.REJECT):
        self.duplicate_consumer = ConsumerPolicy(duplicate_consumer)
        self._registry: dict[Key, list[Entry]] = {}
        self._pending: dict[Key, list[Entry]] = {}
        self._consumer: Consumer | None = None
        self._state = CoordinatorState.UNINITIALIZED
        self._ready = False
        self._delivered = False
        self._contributions = 0

    # ── Introspection ────────────────────────────────────────────

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def consumer(self) -> Consumer | None:
        return self._consumer

    @property
    def contribution_count(self) -> int:
        return self._contributions

    def pending(self) -> dict[Key, list[Entry]]:
        """Entries merged but not yet handed to a consumer."""
        return {key: list(entries) for key, entries in self._pending.items()}

    def view(self) -> RegistryView:
        return RegistryView(self._registry)

    def snapshot(self) -> dict[Key, list[Entry]]:
        return self.view().to_dict()

    def get(self, key: Key) -> tuple[Entry, ...]:
        """Entries filed under ``key`` (empty when the key is unknown)."""
        return tuple(self._registry.get(key, ()))

    # ── Ingestion ────────────────────────────────────────────────

    def contribute(self, contribution: Contribution) -> None:
        """
        Merge a contribution into the registry.

        Per key, entries are appended after anything already filed under the
        key. While no consumer is registered the merge only lands in the
        pending buffer; afterwards it is forwarded immediately.

        Raises:
            InvalidContributionError: malformed contribution (registry untouched)
            ConsumerDeliveryError: the consumer raised (merge already committed)
        """
        try:
            pairs = normalize_contribution(contribution)
        except InvalidContributionError as exc:
            logger.warning("contribution_rejected", **exc.to_dict())
            raise

        delta = merge_into(self._registry, pairs)
        for key, entries in delta.items():
            self._pending.setdefault(key, []).extend(entries)
        self._contributions += 1

        if self._state is CoordinatorState.UNINITIALIZED:
            logger.debug(
                "contribution_buffered",
                keys=len(delta),
                entries=entry_count(delta),
                buffered_keys=len(self._pending),
            )
            return

        logger.debug("contribution_merged", keys=len(delta), entries=entry_count(delta))
        self._deliver()

    # ── Consumer handshake ───────────────────────────────────────

    def register_consumer(self, consumer: Consumer) -> Consumer:
        """
        Declare the single consumer of the merged registry.

        Returns the consumer so this can be used as a decorator.

        Raises:
            InvalidConsumerError: ``consumer`` is not callable
            DuplicateConsumerError: a consumer exists and the policy is ``reject``
        """
        if not callable(consumer):
            error = InvalidConsumerError(
                f"Consumer must be callable, got {type(consumer).__name__}"
            )
            logger.warning("consumer_rejected", **error.to_dict())
            raise error

        if self._consumer is not None:
            if self.duplicate_consumer is ConsumerPolicy.REJECT:
                error = DuplicateConsumerError(
                    "A consumer is already registered; only one consumer is allowed"
                ).with_context(policy=self.duplicate_consumer.value)
                logger.warning("consumer_rejected", **error.to_dict())
                raise error
            logger.info("consumer_replaced", keys=len(self._registry))
            # the newcomer has seen nothing yet
            self._pending = {key: list(entries) for key, entries in self._registry.items()}
            self._delivered = False

        self._consumer = consumer
        self._state = CoordinatorState.ACTIVE
        logger.debug(
            "consumer_registered",
            buffered_keys=len(self._pending),
            contributions=self._contributions,
        )

        if self._contributions or self._ready:
            self._deliver()
        else:
            logger.debug("delivery_deferred")
        return consumer

    def signal_ready(self) -> None:
        """Fire the lifecycle trigger; delivers to a consumer still waiting."""
        if self._ready:
            return
        self._ready = True
        logger.debug("ready_signalled", consumer=self._consumer is not None)
        if self._consumer is not None and not self._delivered:
            self._deliver()

    def _deliver(self) -> None:
        delta, self._pending = self._pending, {}
        self._delivered = True
        view = RegistryView(self._registry, delta)
        logger.debug(
            "registry_delivered",
            keys=len(self._registry),
            delta_keys=len(delta),
            delta_entries=entry_count(delta),
        )
        try:
            self._consumer(view)
        except Exception as exc:
            error = ConsumerDeliveryError(f"Consumer failed: {exc}", cause=exc).with_context(
                delta_keys=sorted(delta)
            )
            logger.error("consumer_failed", **error.to_dict())
            raise error from exc


# ── Process-wide instance ────────────────────────────────────────────

_coordinator: RegistryCoordinator | None = None


def get_coordinator() -> RegistryCoordinator:
    """Get the process-wide coordinator, creating it on first use."""
    global _coordinator
    if _coordinator is None:
        _coordinator = RegistryCoordinator(duplicate_consumer=get_settings().duplicate_consumer)
    return _coordinator


def reset_coordinator() -> None:
    """Discard the process-wide coordinator (for testing)."""
    global _coordinator
    _coordinator = None


def contribute(contribution: Contribution) -> None:
    """Merge ``contribution`` into the process-wide coordinator."""
    get_coordinator().contribute(contribution)


def register_consumer(consumer: Consumer) -> Consumer:
    """Register ``consumer`` with the process-wide coordinator."""
    return get_coordinator().register_consumer(consumer)


def signal_ready() -> None:
    """Fire the lifecycle trigger on the process-wide coordinator."""
    get_coordinator().signal_ready()


__all__ = [
    "Consumer",
    "CoordinatorState",
    "RegistryCoordinator",
    "RegistryView",
    "contribute",
    "get_coordinator",
    "register_consumer",
    "reset_coordinator",
    "signal_ready",
]
