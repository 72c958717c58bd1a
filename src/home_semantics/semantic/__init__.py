"""Semantic type resolution and relation inference.

This package provides:
- SemanticTypeResolver: Maps an item's tags to one semantic type and its Property
- RelationInferenceEngine: Derives hasLocation/isPartOf/isPointOf/hasPoint/relatesTo
- Predicate factories for filtering items by category, type or property
"""

from home_semantics.semantic.predicates import (
    is_a,
    is_equipment,
    is_location,
    is_point,
    relates_to,
)
from home_semantics.semantic.relations import (
    RELATION_RULES,
    RelationInferenceEngine,
    RelationKind,
    RelationRule,
)
from home_semantics.semantic.resolver import SemanticTypeResolver

__all__ = [
    "SemanticTypeResolver",
    "RelationInferenceEngine",
    "RelationRule",
    "RelationKind",
    "RELATION_RULES",
    "is_location",
    "is_equipment",
    "is_point",
    "is_a",
    "relates_to",
]
