"""Live cache of resolved semantic metadata.

The cache holds one ResolvedMetadata record per classified item and keeps
it current with the item change feed. Every change is published to
subscribers as a MetadataEvent, synchronously and in application order.

All record mutations and snapshots run under a single re-entrant lock, so a
reader never observes a half-applied change and subscribers may read the
cache from inside their callback.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable

from home_semantics.domain.models import ChangeKind, Item, MetadataEvent, ResolvedMetadata
from home_semantics.items.provider import ItemProvider
from home_semantics.observability.metrics import METRICS
from home_semantics.semantic.relations import RelationInferenceEngine
from home_semantics.semantic.resolver import SemanticTypeResolver

logger = logging.getLogger(__name__)

MetadataSubscriber = Callable[[MetadataEvent], None]


class SemanticsMetadataCache:
    """Authoritative set of resolved metadata records.

    Acts as an item change listener. When ``refresh_neighbors`` is on, a
    change to an item also recomputes its parents and the items that list it
    as a group, since their relations depend on its category. Neighbours
    only emit UPDATED when their record actually changed.
    """

    def __init__(
        self,
        resolver: SemanticTypeResolver,
        items: ItemProvider,
        engine: RelationInferenceEngine | None = None,
        refresh_neighbors: bool = True,
    ):
        """Initialize the cache.

        Args:
            resolver: Semantic type resolver over a loaded tag registry.
            items: Item collaborator used for the initial scan, the change
                feed and parent/member lookups.
            engine: Relation engine (defaults to the standard rule table).
            refresh_neighbors: Recompute direct neighbours of changed items.
        """
        self.resolver = resolver
        self.items = items
        self.engine = engine or RelationInferenceEngine(resolver)
        self.refresh_neighbors = refresh_neighbors

        self._lock = threading.RLock()
        self._records: dict[str, ResolvedMetadata] = {}
        self._subscribers: list[MetadataSubscriber] = []
        self._started = False

    # Lifecycle

    def start(self) -> None:
        """Process every known item, then follow the change feed.

        The item provider is frozen while its items are read and the cache
        subscribes, so no change is missed or applied twice.
        """
        with self._lock:
            if self._started:
                return
            with self.items.frozen():
                snapshot = self.items.get_all()
                self.items.add_change_listener(self)
                for item in snapshot:
                    self._apply(item.name, self._classify(item), always_notify=True)
            self._started = True
            METRICS.metadata_records.set(len(self._records))

        logger.info(
            "Semantic metadata cache started: %d items, %d records",
            len(snapshot),
            len(self._records),
        )

    def stop(self) -> None:
        """Unsubscribe and discard all records without notifying."""
        # Unsubscribe before taking our lock; the provider may be waiting on
        # it while holding its dispatch lock.
        self.items.remove_change_listener(self)
        with self._lock:
            discarded = len(self._records)
            self._records.clear()
            self._started = False
            METRICS.metadata_records.set(0)
        logger.info("Semantic metadata cache stopped, discarded %d records", discarded)

    @property
    def is_started(self) -> bool:
        with self._lock:
            return self._started

    # Subscribers

    def subscribe(self, subscriber: MetadataSubscriber) -> None:
        """Register a callback for metadata change events."""
        with self._lock:
            if subscriber not in self._subscribers:
                self._subscribers.append(subscriber)

    def unsubscribe(self, subscriber: MetadataSubscriber) -> None:
        """Remove a previously registered callback."""
        with self._lock:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

    # Queries

    def get_all(self) -> list[ResolvedMetadata]:
        """Snapshot of all records, ordered by item name."""
        with self._lock:
            return [self._records[name] for name in sorted(self._records)]

    def get(self, item_name: str) -> ResolvedMetadata | None:
        """The record for one item, if it is classified."""
        with self._lock:
            return self._records.get(item_name)

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._records)

    # Change feed

    def on_item_added(self, item: Item) -> None:
        """Classify a new item and store its record if it has a semantic type."""
        with METRICS.processing_duration_seconds.time(), self._lock:
            self._apply(item.name, self._classify(item), always_notify=True)
            self._refresh(self._neighbors(item), exclude=item.name)
            METRICS.metadata_records.set(len(self._records))

    def on_item_updated(self, old_item: Item, item: Item) -> None:
        """Recompute an item from scratch after a change."""
        with METRICS.processing_duration_seconds.time(), self._lock:
            if old_item.name != item.name:
                self._apply(old_item.name, None, always_notify=True)
            self._apply(item.name, self._classify(item), always_notify=True)
            self._refresh(
                self._neighbors(old_item) | self._neighbors(item), exclude=item.name
            )
            METRICS.metadata_records.set(len(self._records))

    def on_item_removed(self, item: Item) -> None:
        """Drop the record of a removed item, if it had one."""
        with METRICS.processing_duration_seconds.time(), self._lock:
            self._apply(item.name, None, always_notify=True)
            self._refresh(self._neighbors(item), exclude=item.name)
            METRICS.metadata_records.set(len(self._records))

    # Internals

    def _classify(self, item: Item) -> ResolvedMetadata | None:
        """Compute the record of a changed item and count the outcome."""
        record = self._compute(item)
        result = "classified" if record is not None else "unclassified"
        METRICS.items_processed_total.labels(result=result).inc()
        return record

    def _compute(self, item: Item) -> ResolvedMetadata | None:
        """Resolve the record for an item against the current item graph."""
        category = self.resolver.resolve_category(item)
        if category is None:
            return None

        parents: list[Item] = []
        for name in item.group_names:
            parent = self.items.get(name)
            if parent is not None:
                parents.append(parent)
        members = self.items.get_members(item.name) if item.is_group else []

        relations = self.engine.infer_relations(item, category, parents, members)
        return ResolvedMetadata(
            item_name=item.name, semantic_type=category.id, relations=relations
        )

    def _neighbors(self, item: Item) -> set[str]:
        """Items whose relations may depend on this item's category."""
        if not self.refresh_neighbors:
            return set()
        names = set(item.group_names)
        names.update(member.name for member in self.items.get_members(item.name))
        return names

    def _refresh(self, names: Iterable[str], exclude: str) -> None:
        for name in sorted(set(names) - {exclude}):
            neighbor = self.items.get(name)
            if neighbor is None:
                continue
            self._apply(name, self._compute(neighbor), always_notify=False)

    def _apply(
        self, name: str, record: ResolvedMetadata | None, always_notify: bool
    ) -> None:
        """Store or drop a record and emit the matching event. Lock held."""
        previous = self._records.get(name)

        if record is None:
            if previous is not None:
                del self._records[name]
                self._emit(ChangeKind.REMOVED, previous)
            return

        if previous is None:
            self._records[name] = record
            self._emit(ChangeKind.ADDED, record)
        elif always_notify or previous != record:
            self._records[name] = record
            self._emit(ChangeKind.UPDATED, record, previous)

    def _emit(
        self,
        kind: ChangeKind,
        record: ResolvedMetadata,
        previous: ResolvedMetadata | None = None,
    ) -> None:
        event = MetadataEvent(
            kind=kind,
            metadata=record,
            timestamp_ms=int(time.time() * 1000),
            previous=previous,
        )
        METRICS.metadata_events_total.labels(kind=kind.value).inc()
        logger.debug("Metadata %s: %s -> %s", kind.value, record.item_name, record.semantic_type)

        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception as e:
                logger.error(
                    "Metadata subscriber failed on %s of %s: %s",
                    kind.value,
                    record.item_name,
                    e,
                )
                METRICS.errors_total.labels(error_type="metadata_subscriber").inc()
