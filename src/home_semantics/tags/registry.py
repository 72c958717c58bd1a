"""Suffix-indexed registry of semantic tag definitions.

Every tag id is registered under itself and each of its right-aligned
suffixes, so ``Point_Sensor_BinarySensor``, ``Sensor_BinarySensor`` and
``BinarySensor`` all resolve to the same definition.

When two definitions share a suffix the later registration wins. Registration
order is made deterministic by grouping the catalog by category (Location,
Equipment, Point, Property) and keeping catalog order inside each group. The
rule depends on catalog ordering and is therefore a configuration risk;
``collisions()`` reports affected suffixes so tooling can flag them.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from home_semantics.domain.models import CATEGORY_ORDER, TagCategory, TagDefinition
from home_semantics.observability.metrics import METRICS
from home_semantics.tags.catalog import check_definition

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SuffixCollision:
    """A suffix claimed by more than one definition."""

    suffix: str
    """The shared suffix."""

    winner: TagDefinition
    """Definition the suffix resolves to (last registered)."""

    shadowed: tuple[TagDefinition, ...]
    """Earlier definitions that lost the suffix, in registration order."""


@dataclass(frozen=True, slots=True)
class _Index:
    """Immutable snapshot of a loaded registry."""

    by_suffix: dict[str, TagDefinition]
    definitions: tuple[TagDefinition, ...]
    collisions: tuple[SuffixCollision, ...]


def _registration_order(catalog: Iterable[TagDefinition]) -> list[TagDefinition]:
    """Stable category grouping; catalog order is kept within a category."""
    rank = {category: i for i, category in enumerate(CATEGORY_ORDER)}
    return sorted(catalog, key=lambda d: rank[d.category])


def _build_index(catalog: Iterable[TagDefinition]) -> _Index:
    entries = list(catalog)
    for definition in entries:
        check_definition(definition)

    ordered = _registration_order(entries)
    by_suffix: dict[str, TagDefinition] = {}
    claims: dict[str, list[TagDefinition]] = {}
    for definition in ordered:
        for suffix in definition.suffixes():
            previous = by_suffix.get(suffix)
            if previous is not None and previous != definition:
                logger.debug(
                    "Tag suffix %r of %s shadows %s", suffix, definition.id, previous.id
                )
            by_suffix[suffix] = definition
            claims.setdefault(suffix, []).append(definition)

    collisions = tuple(
        SuffixCollision(suffix=suffix, winner=owners[-1], shadowed=tuple(owners[:-1]))
        for suffix, owners in sorted(claims.items())
        if len(owners) > 1
    )

    distinct: dict[str, TagDefinition] = {}
    for definition in ordered:
        distinct[definition.id] = definition

    return _Index(
        by_suffix=by_suffix,
        definitions=tuple(distinct.values()),
        collisions=collisions,
    )


class TagRegistry:
    """Read-only lookup of tag definitions by id or id suffix.

    Built once from the catalog at startup. Lookups need no locking: a
    reload builds a complete new index and swaps it in with one assignment.
    """

    def __init__(self, catalog: Iterable[TagDefinition] | None = None):
        """Initialize the registry.

        Args:
            catalog: Optional catalog to load immediately.

        Raises:
            CatalogError: If a definition is invalid.
        """
        self._load_lock = threading.Lock()
        self._index = _Index(by_suffix={}, definitions=(), collisions=())
        if catalog is not None:
            self.load(catalog)

    def load(self, catalog: Iterable[TagDefinition]) -> None:
        """Build the suffix index, replacing any previous one.

        Args:
            catalog: Tag definitions to index.

        Raises:
            CatalogError: If a definition is invalid. The previous index is kept.
        """
        with self._load_lock:
            index = _build_index(catalog)
            self._index = index

        METRICS.tag_registry_entries.set(len(index.by_suffix))
        METRICS.tag_suffix_collisions.set(len(index.collisions))
        if index.collisions:
            logger.warning(
                "Tag registry has %d ambiguous suffixes: %s",
                len(index.collisions),
                ", ".join(c.suffix for c in index.collisions),
            )
        logger.info(
            "Tag registry loaded: %d definitions, %d lookup keys",
            len(index.definitions),
            len(index.by_suffix),
        )

    def lookup(self, tag_id: str) -> TagDefinition | None:
        """Resolve a fully qualified tag id or any of its suffixes.

        Args:
            tag_id: Tag id such as 'Location_Room_Bedroom' or 'Bedroom'.

        Returns:
            The matching definition, or None if unknown.
        """
        return self._index.by_suffix.get(tag_id)

    def get_by_label(self, label: str, locale: str | None = None) -> TagDefinition | None:
        """Find the first definition whose preferred label matches.

        Args:
            label: Label to search for (case-insensitive).
            locale: Locale for localized labels (e.g. 'de' or 'de_DE').

        Returns:
            The first matching definition in registration order, or None.
        """
        wanted = label.strip().casefold()
        for definition in self._index.definitions:
            if definition.labels_for(locale)[0].casefold() == wanted:
                return definition
        return None

    def get_by_label_or_synonym(
        self, text: str, locale: str | None = None
    ) -> TagDefinition | None:
        """Find the first definition with a matching synonym for the locale.

        The default label only counts for definitions without synonyms in
        that locale.
        """
        wanted = text.strip().casefold()
        for definition in self._index.definitions:
            candidates = {s.casefold() for s in definition.labels_for(locale)}
            if wanted in candidates:
                return definition
        return None

    def by_category(self, category: TagCategory) -> list[TagDefinition]:
        """All definitions of one category in registration order."""
        return [d for d in self._index.definitions if d.category is category]

    def definitions(self) -> tuple[TagDefinition, ...]:
        """All distinct definitions in registration order."""
        return self._index.definitions

    def collisions(self) -> tuple[SuffixCollision, ...]:
        """Suffixes claimed by more than one definition, sorted by suffix."""
        return self._index.collisions

    def __contains__(self, tag_id: object) -> bool:
        return isinstance(tag_id, str) and tag_id in self._index.by_suffix

    def __len__(self) -> int:
        return len(self._index.by_suffix)

    def __iter__(self) -> Iterator[TagDefinition]:
        return iter(self._index.definitions)
