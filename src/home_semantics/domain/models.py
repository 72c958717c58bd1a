"""Core domain models for home-semantics."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

TAG_DELIMITER = "_"
"""Separator between the segments of a hierarchical tag id."""

METADATA_NAMESPACE = "semantics"
"""Namespace under which resolved metadata is published."""


class TagCategory(Enum):
    """The four top-level semantic roles a tag can denote."""

    LOCATION = "Location"
    EQUIPMENT = "Equipment"
    POINT = "Point"
    PROPERTY = "Property"

    @classmethod
    def parse(cls, value: str) -> TagCategory:
        """Parse a category from its name, case-insensitively.

        Raises:
            ValueError: If the value names no category.
        """
        for category in cls:
            if category.value.lower() == value.strip().lower():
                return category
        raise ValueError(f"Unknown tag category: {value!r}")


# Registration order for the tag registry. Later categories win suffix collisions.
CATEGORY_ORDER: tuple[TagCategory, ...] = (
    TagCategory.LOCATION,
    TagCategory.EQUIPMENT,
    TagCategory.POINT,
    TagCategory.PROPERTY,
)


@dataclass(frozen=True, slots=True)
class TagDefinition:
    """Immutable definition of a semantic tag from the catalog.

    Tag ids are hierarchical: segments are ordered root-to-leaf and joined
    with ``_``, so ``Point_Sensor_BinarySensor`` is a kind of ``Point_Sensor``.
    """

    id: str
    """Fully qualified tag id (e.g. 'Location_Room_Bedroom')."""

    category: TagCategory
    """The single category this tag belongs to."""

    label: str = ""
    """Default display label."""

    description: str = ""
    """Human-readable description."""

    synonyms: dict[str, tuple[str, ...]] = field(
        default_factory=dict, compare=False, hash=False
    )
    """Localized labels keyed by locale; the first entry is the preferred label."""

    @property
    def segments(self) -> tuple[str, ...]:
        """Id segments from root to leaf."""
        return tuple(self.id.split(TAG_DELIMITER))

    @property
    def name(self) -> str:
        """Leaf segment of the id (e.g. 'Bedroom')."""
        return self.segments[-1]

    @property
    def parent_id(self) -> str | None:
        """Id of the parent tag, or None for a root tag."""
        if TAG_DELIMITER not in self.id:
            return None
        return self.id.rsplit(TAG_DELIMITER, 1)[0]

    def suffixes(self) -> list[str]:
        """All right-aligned suffixes of the id, longest first.

        'A_B_C' yields ['A_B_C', 'B_C', 'C'].
        """
        segments = self.segments
        return [TAG_DELIMITER.join(segments[i:]) for i in range(len(segments))]

    def is_a(self, other: TagDefinition) -> bool:
        """Check whether this tag equals or specializes another tag."""
        return self.id == other.id or self.id.startswith(other.id + TAG_DELIMITER)

    def labels_for(self, locale: str | None) -> tuple[str, ...]:
        """Label and synonyms for a locale.

        Looks up the full locale ('de_DE'), then its language ('de'), and
        falls back to the default label.
        """
        if locale:
            normalized = locale.replace("-", "_")
            for key in (normalized, normalized.split("_", 1)[0]):
                entries = self.synonyms.get(key)
                if entries:
                    return entries
        return (self.label,) if self.label else (self.name,)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "category": self.category.value,
            "label": self.label,
            "description": self.description,
            "synonyms": {k: list(v) for k, v in self.synonyms.items()},
        }


@dataclass(frozen=True, slots=True)
class Item:
    """Read-only snapshot of an item in the home-automation model."""

    name: str
    """Unique item name."""

    tags: frozenset[str] = frozenset()
    """Assigned tag ids or tag id suffixes."""

    group_names: tuple[str, ...] = ()
    """Names of the groups this item is a member of, in declaration order."""

    is_group: bool = False
    """Whether this item is a group that can have members."""

    read_only: bool = False
    """Whether the item state is read-only (sensor-like)."""

    label: str | None = None
    """Optional display label."""


@dataclass(frozen=True, slots=True)
class ResolvedMetadata:
    """Derived semantic metadata for one item.

    The main value is the semantic type id; ``relations`` maps relation names
    (e.g. 'hasLocation') to the referenced item name or property tag id.
    """

    item_name: str
    semantic_type: str
    relations: Mapping[str, str] = field(default_factory=dict, hash=False)
    namespace: str = METADATA_NAMESPACE

    def __post_init__(self) -> None:
        # Read-only once built
        object.__setattr__(self, "relations", MappingProxyType(dict(self.relations)))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "namespace": self.namespace,
            "itemName": self.item_name,
            "value": self.semantic_type,
            "config": dict(sorted(self.relations.items())),
        }


class ChangeKind(Enum):
    """Kinds of metadata change notifications."""

    ADDED = "added"
    UPDATED = "updated"
    REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class MetadataEvent:
    """A change to the resolved metadata set."""

    kind: ChangeKind
    """What happened to the record."""

    metadata: ResolvedMetadata
    """The new record, or the discarded one for REMOVED."""

    timestamp_ms: int
    """When the change was applied (Unix ms)."""

    previous: ResolvedMetadata | None = None
    """Prior record for UPDATED events."""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "kind": self.kind.value,
            "metadata": self.metadata.to_dict(),
            "previous": self.previous.to_dict() if self.previous else None,
            "timestamp": self.timestamp_ms,
        }
