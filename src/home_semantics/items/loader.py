"""Item model loading from YAML files."""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from home_semantics.domain.models import Item

logger = logging.getLogger(__name__)


class ItemModelError(Exception):
    """Raised when an item model file cannot be loaded."""

    pass


class ItemEntry(BaseModel):
    """One item in a model file."""

    name: str
    tags: list[str] = Field(default_factory=list)
    groups: list[str] = Field(default_factory=list)
    group: bool = False
    read_only: bool = False
    label: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("item name must not be blank")
        return value.strip()

    def to_item(self) -> Item:
        """Convert to an immutable Item snapshot."""
        # Keep declared group order, dropping repeats
        group_names = tuple(dict.fromkeys(g.strip() for g in self.groups if g.strip()))
        return Item(
            name=self.name,
            tags=frozenset(t.strip() for t in self.tags if t.strip()),
            group_names=group_names,
            is_group=self.group,
            read_only=self.read_only,
            label=self.label,
        )


def parse_item_model(data: object, source: str = "<memory>") -> list[Item]:
    """Parse an item model document.

    Raises:
        ItemModelError: If the document is malformed or names repeat.
    """
    if data is None:
        return []
    if not isinstance(data, dict) or not isinstance(data.get("items", []), list):
        raise ItemModelError(f"{source}: expected a mapping with an 'items' list")

    items: list[Item] = []
    seen: set[str] = set()
    for index, raw in enumerate(data.get("items", [])):
        try:
            entry = ItemEntry.model_validate(raw)
        except ValidationError as e:
            raise ItemModelError(f"{source}: invalid item {index}: {e}") from e
        if entry.name in seen:
            raise ItemModelError(f"{source}: duplicate item name {entry.name!r}")
        seen.add(entry.name)
        items.append(entry.to_item())
    return items


def load_item_model(path: Path) -> list[Item]:
    """Load items from a YAML model file.

    Args:
        path: Path to the model file.

    Returns:
        Items in file order.

    Raises:
        ItemModelError: If the file is missing or invalid.
    """
    if not path.exists():
        raise ItemModelError(f"Item model file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ItemModelError(f"Failed to parse item model {path}: {e}") from e

    items = parse_item_model(data, str(path))
    logger.debug("Loaded %d items from %s", len(items), path)
    return items
