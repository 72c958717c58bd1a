"""Semantic type resolution for items.

The resolver maps an item's tag set to exactly one semantic type (a
Location, Equipment or Point tag) and, for Points, to the Property the point
relates to. Tags are scanned in lexicographic order so the result never
depends on set iteration order.
"""

from __future__ import annotations

from home_semantics.domain.models import Item, TagCategory, TagDefinition
from home_semantics.tags.registry import TagRegistry

SENSOR_POINT_ID = "Point_Sensor"
"""Point type inferred for read-only items that only carry a Property tag."""

COMMAND_POINT_ID = "Point_Command"
"""Point type inferred for writable items that only carry a Property tag."""

_FALLBACK_LABELS = {SENSOR_POINT_ID: "Sensor", COMMAND_POINT_ID: "Command"}


class SemanticTypeResolver:
    """Stateless classifier over a tag registry."""

    def __init__(self, registry: TagRegistry):
        """Initialize the resolver.

        Args:
            registry: Loaded tag registry.
        """
        self.registry = registry

    def _definitions(self, item: Item) -> list[TagDefinition]:
        """Registry hits for the item's tags, in lexicographic tag order."""
        definitions = []
        for tag in sorted(item.tags):
            definition = self.registry.lookup(tag)
            if definition is not None:
                definitions.append(definition)
        return definitions

    def _fallback_point(self, read_only: bool) -> TagDefinition:
        point_id = SENSOR_POINT_ID if read_only else COMMAND_POINT_ID
        definition = self.registry.lookup(point_id)
        if definition is not None and definition.category is TagCategory.POINT:
            return definition
        return TagDefinition(
            id=point_id, category=TagCategory.POINT, label=_FALLBACK_LABELS[point_id]
        )

    def resolve_category(self, item: Item, read_only: bool | None = None) -> TagDefinition | None:
        """Determine the single semantic type of an item.

        The first non-Property tag wins. An item carrying only Property tags is
        taken to be a Point: a sensor if it is read-only, a command otherwise.

        Args:
            item: The item to classify.
            read_only: Overrides ``item.read_only`` for the Point fallback.

        Returns:
            A Location, Equipment or Point definition, or None if unclassified.
        """
        has_property = False
        for definition in self._definitions(item):
            if definition.category is not TagCategory.PROPERTY:
                return definition
            has_property = True

        if has_property:
            return self._fallback_point(item.read_only if read_only is None else read_only)
        return None

    def resolve_property(self, item: Item) -> TagDefinition | None:
        """Determine the Property a Point relates to.

        Returns:
            The first Property definition among the item's tags if the item
            resolves to a Point, otherwise None.
        """
        category = self.resolve_category(item)
        if category is None or category.category is not TagCategory.POINT:
            return None
        return self.first_property(item)

    def first_property(self, item: Item) -> TagDefinition | None:
        """First Property tag of an item, regardless of its semantic type."""
        for definition in self._definitions(item):
            if definition.category is TagCategory.PROPERTY:
                return definition
        return None

    def semantic_types(self, item: Item) -> set[TagDefinition]:
        """All non-Property definitions among the item's tags.

        Falls back to the inferred Point type like ``resolve_category``.
        """
        types = {
            d for d in self._definitions(item) if d.category is not TagCategory.PROPERTY
        }
        if not types and self.first_property(item) is not None:
            types.add(self._fallback_point(item.read_only))
        return types

    def properties(self, item: Item) -> set[TagDefinition]:
        """All Property definitions among the item's tags."""
        return {d for d in self._definitions(item) if d.category is TagCategory.PROPERTY}

    def category_of(self, item: Item) -> TagCategory | None:
        """Shortcut for the category of ``resolve_category``."""
        definition = self.resolve_category(item)
        return definition.category if definition else None
