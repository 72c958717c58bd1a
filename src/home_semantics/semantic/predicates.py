"""Predicates for filtering items by semantics."""

from collections.abc import Callable

from home_semantics.domain.models import Item, TagCategory, TagDefinition
from home_semantics.semantic.resolver import SemanticTypeResolver

ItemPredicate = Callable[[Item], bool]


def _has_category(resolver: SemanticTypeResolver, category: TagCategory) -> ItemPredicate:
    def predicate(item: Item) -> bool:
        return any(t.category is category for t in resolver.semantic_types(item))

    return predicate


def is_location(resolver: SemanticTypeResolver) -> ItemPredicate:
    """Items that represent a Location."""
    return _has_category(resolver, TagCategory.LOCATION)


def is_equipment(resolver: SemanticTypeResolver) -> ItemPredicate:
    """Items that represent an Equipment."""
    return _has_category(resolver, TagCategory.EQUIPMENT)


def is_point(resolver: SemanticTypeResolver) -> ItemPredicate:
    """Items that represent a Point."""
    return _has_category(resolver, TagCategory.POINT)


def is_a(resolver: SemanticTypeResolver, tag: TagDefinition) -> ItemPredicate:
    """Items with a semantic type equal to or more specific than ``tag``.

    ``is_a(resolver, room)`` matches items tagged 'Bedroom' when the catalog
    has 'Location_Room' and 'Location_Room_Bedroom'.
    """

    def predicate(item: Item) -> bool:
        return any(t.is_a(tag) for t in resolver.semantic_types(item))

    return predicate


def relates_to(resolver: SemanticTypeResolver, prop: TagDefinition) -> ItemPredicate:
    """Items carrying a Property tag equal to or more specific than ``prop``."""

    def predicate(item: Item) -> bool:
        return any(p.is_a(prop) for p in resolver.properties(item))

    return predicate
