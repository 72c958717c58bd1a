"""Relation inference from semantic types and the item hierarchy.

Relations are derived, never stored on items: an item's semantic category
is matched against the categories of its parent groups and, for groups, its
members using a static rule table.

Known limitation: a relation name maps to a single target. When several
parents (or members) satisfy rules with the same relation name, the one
processed last wins, e.g. an Equipment in two Location groups only keeps
the ``hasLocation`` of the later group.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from home_semantics.domain.models import Item, TagCategory, TagDefinition
from home_semantics.semantic.resolver import SemanticTypeResolver

logger = logging.getLogger(__name__)

HAS_LOCATION = "hasLocation"
IS_PART_OF = "isPartOf"
IS_POINT_OF = "isPointOf"
HAS_POINT = "hasPoint"
RELATES_TO = "relatesTo"


class RelationKind(Enum):
    """Where a relation's target comes from."""

    PARENT = "parent"
    MEMBER = "member"
    PROPERTY = "property"


@dataclass(frozen=True, slots=True)
class RelationRule:
    """A static rule mapping a category pair to a relation name."""

    kind: RelationKind
    source: TagCategory
    """Category of the item the relation is recorded on."""

    target: TagCategory
    """Category of the referenced parent, member or tag."""

    name: str
    """Relation name."""

    def matches(self, source: TagCategory, target: TagCategory) -> bool:
        return self.source is source and self.target is target


RELATION_RULES: tuple[RelationRule, ...] = (
    RelationRule(RelationKind.PARENT, TagCategory.EQUIPMENT, TagCategory.LOCATION, HAS_LOCATION),
    RelationRule(RelationKind.PARENT, TagCategory.POINT, TagCategory.LOCATION, HAS_LOCATION),
    RelationRule(RelationKind.PARENT, TagCategory.LOCATION, TagCategory.LOCATION, IS_PART_OF),
    RelationRule(RelationKind.PARENT, TagCategory.EQUIPMENT, TagCategory.EQUIPMENT, IS_PART_OF),
    RelationRule(RelationKind.PARENT, TagCategory.POINT, TagCategory.EQUIPMENT, IS_POINT_OF),
    RelationRule(RelationKind.MEMBER, TagCategory.EQUIPMENT, TagCategory.POINT, HAS_POINT),
    RelationRule(RelationKind.PROPERTY, TagCategory.POINT, TagCategory.PROPERTY, RELATES_TO),
)


def rules_of_kind(kind: RelationKind) -> tuple[RelationRule, ...]:
    """Rules of one kind, in table order."""
    return tuple(rule for rule in RELATION_RULES if rule.kind is kind)


class RelationInferenceEngine:
    """Applies the relation table to an item and its direct neighbours.

    Pure: reads only its arguments and the immutable tag registry behind the
    resolver.
    """

    def __init__(
        self,
        resolver: SemanticTypeResolver,
        rules: Iterable[RelationRule] = RELATION_RULES,
    ):
        """Initialize the engine.

        Args:
            resolver: Resolver used for the item, its parents and members.
            rules: Relation table (defaults to the standard rules).
        """
        self.resolver = resolver
        rules = tuple(rules)
        self._parent_rules = tuple(r for r in rules if r.kind is RelationKind.PARENT)
        self._member_rules = tuple(r for r in rules if r.kind is RelationKind.MEMBER)
        self._property_rules = tuple(r for r in rules if r.kind is RelationKind.PROPERTY)

    def infer_relations(
        self,
        item: Item,
        category: TagDefinition | None,
        parents: Iterable[Item] = (),
        members: Iterable[Item] = (),
    ) -> dict[str, str]:
        """Derive named relations for an item.

        Args:
            item: The item to derive relations for.
            category: The item's resolved semantic type (None if unclassified).
            parents: Live parent items in processing order.
            members: Live member items in processing order (groups only).

        Returns:
            Relation name to target (item name or property tag id).
        """
        if category is None:
            return {}

        relations: dict[str, str] = {}
        source = category.category

        for rule in self._property_rules:
            if rule.source is source:
                prop = self.resolver.first_property(item)
                if prop is not None:
                    relations[rule.name] = prop.id

        for parent in parents:
            self._apply(self._parent_rules, item, source, parent, relations)

        for member in members:
            self._apply(self._member_rules, item, source, member, relations)

        return relations

    def _apply(
        self,
        rules: tuple[RelationRule, ...],
        item: Item,
        source: TagCategory,
        other: Item,
        relations: dict[str, str],
    ) -> None:
        other_category = self.resolver.category_of(other)
        if other_category is None:
            return
        for rule in rules:
            if rule.matches(source, other_category):
                previous = relations.get(rule.name)
                if previous is not None and previous != other.name:
                    logger.debug(
                        "Relation %s of %s: %s overrides %s",
                        rule.name,
                        item.name,
                        other.name,
                        previous,
                    )
                relations[rule.name] = other.name
