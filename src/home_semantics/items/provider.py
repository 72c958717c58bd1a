"""Item collaborator interface and an in-memory implementation."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol

from home_semantics.domain.models import Item
from home_semantics.observability.metrics import METRICS

logger = logging.getLogger(__name__)


class ItemRegistryError(Exception):
    """Raised on invalid item registry mutations."""

    pass


class ItemChangeListener(Protocol):
    """Receives item change notifications."""

    def on_item_added(self, item: Item) -> None: ...

    def on_item_updated(self, old_item: Item, item: Item) -> None: ...

    def on_item_removed(self, item: Item) -> None: ...


class ItemProvider(Protocol):
    """What the metadata cache needs from the item store."""

    def get_all(self) -> list[Item]: ...

    def get(self, name: str) -> Item | None: ...

    def get_members(self, group_name: str) -> list[Item]: ...

    def add_change_listener(self, listener: ItemChangeListener) -> None: ...

    def remove_change_listener(self, listener: ItemChangeListener) -> None: ...

    def frozen(self) -> AbstractContextManager[None]: ...


class InMemoryItemRegistry:
    """Thread-safe in-memory item store with change notifications.

    Each mutation and the notifications it triggers run under one dispatch
    lock, so listeners see events for an item in order and can read a graph
    that does not change while they handle an event. Reads only take a
    short data lock.
    """

    def __init__(self, items: Iterable[Item] = ()):
        """Initialize the registry.

        Args:
            items: Initial items (no notifications are sent for them).

        Raises:
            ItemRegistryError: If two items share a name.
        """
        self._lock = threading.Lock()
        self._dispatch_lock = threading.RLock()
        self._items: dict[str, Item] = {}
        self._listeners: list[ItemChangeListener] = []

        for item in items:
            if item.name in self._items:
                raise ItemRegistryError(f"Duplicate item name: {item.name}")
            self._items[item.name] = item
        METRICS.items_known.set(len(self._items))

    # Reads

    def get_all(self) -> list[Item]:
        """All items sorted by name."""
        with self._lock:
            return [self._items[name] for name in sorted(self._items)]

    def get(self, name: str) -> Item | None:
        """Get an item by name."""
        with self._lock:
            return self._items.get(name)

    def get_members(self, group_name: str) -> list[Item]:
        """Items that list ``group_name`` among their groups, sorted by name."""
        with self._lock:
            return [
                self._items[name]
                for name in sorted(self._items)
                if group_name in self._items[name].group_names
            ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._items

    def __iter__(self) -> Iterator[Item]:
        return iter(self.get_all())

    # Listeners

    def add_change_listener(self, listener: ItemChangeListener) -> None:
        """Subscribe to add/update/remove events."""
        with self._dispatch_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_change_listener(self, listener: ItemChangeListener) -> None:
        """Unsubscribe; waits for an in-flight notification to finish."""
        with self._dispatch_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    @contextmanager
    def frozen(self) -> Iterator[None]:
        """Hold off all mutations while the block runs."""
        with self._dispatch_lock:
            yield

    # Mutations

    def add(self, item: Item) -> None:
        """Add a new item.

        Raises:
            ItemRegistryError: If an item with that name exists.
        """
        with self._dispatch_lock:
            with self._lock:
                if item.name in self._items:
                    raise ItemRegistryError(f"Item already exists: {item.name}")
                self._items[item.name] = item
                METRICS.items_known.set(len(self._items))
            self._notify("added", item, lambda listener: listener.on_item_added(item))

    def update(self, item: Item) -> Item:
        """Replace an existing item.

        Returns:
            The previous version of the item.

        Raises:
            ItemRegistryError: If no item with that name exists.
        """
        with self._dispatch_lock:
            with self._lock:
                old = self._items.get(item.name)
                if old is None:
                    raise ItemRegistryError(f"Item does not exist: {item.name}")
                self._items[item.name] = item
            self._notify("updated", item, lambda listener: listener.on_item_updated(old, item))
            return old

    def remove(self, name: str) -> Item | None:
        """Remove an item by name.

        Returns:
            The removed item, or None if it did not exist.
        """
        with self._dispatch_lock:
            with self._lock:
                item = self._items.pop(name, None)
                METRICS.items_known.set(len(self._items))
            if item is not None:
                self._notify("removed", item, lambda listener: listener.on_item_removed(item))
            return item

    def replace_all(self, items: Iterable[Item]) -> tuple[int, int, int]:
        """Replace the whole model, emitting one event per changed item.

        Removals are applied first, then additions, then updates, each in
        name order.

        Returns:
            Counts of (added, updated, removed) items.

        Raises:
            ItemRegistryError: If the new model has duplicate names.
        """
        incoming: dict[str, Item] = {}
        for item in items:
            if item.name in incoming:
                raise ItemRegistryError(f"Duplicate item name: {item.name}")
            incoming[item.name] = item

        with self._dispatch_lock:
            with self._lock:
                current = dict(self._items)

            removed = sorted(set(current) - set(incoming))
            added = sorted(set(incoming) - set(current))
            updated = sorted(
                name for name in set(current) & set(incoming) if current[name] != incoming[name]
            )

            for name in removed:
                self.remove(name)
            for name in added:
                self.add(incoming[name])
            for name in updated:
                self.update(incoming[name])

        logger.info(
            "Item model replaced: %d added, %d updated, %d removed",
            len(added),
            len(updated),
            len(removed),
        )
        return len(added), len(updated), len(removed)

    def _notify(
        self, kind: str, item: Item, deliver: Callable[[ItemChangeListener], None]
    ) -> None:
        """Deliver an event to all listeners. Caller holds the dispatch lock."""
        for listener in list(self._listeners):
            try:
                deliver(listener)
            except Exception:
                logger.exception("Item listener failed on %s of %s", kind, item.name)
                METRICS.errors_total.labels(error_type="item_listener").inc()
