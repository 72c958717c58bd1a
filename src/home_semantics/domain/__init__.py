"""Domain models for home-semantics."""

from home_semantics.domain.models import (
    ChangeKind,
    Item,
    MetadataEvent,
    ResolvedMetadata,
    TagCategory,
    TagDefinition,
)

__all__ = [
    "TagCategory",
    "TagDefinition",
    "Item",
    "ResolvedMetadata",
    "ChangeKind",
    "MetadataEvent",
]
