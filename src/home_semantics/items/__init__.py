"""Item collaborator interface, in-memory item registry and model loading."""

from home_semantics.items.loader import ItemModelError, load_item_model
from home_semantics.items.provider import (
    InMemoryItemRegistry,
    ItemChangeListener,
    ItemProvider,
    ItemRegistryError,
)

__all__ = [
    "ItemProvider",
    "ItemChangeListener",
    "InMemoryItemRegistry",
    "ItemRegistryError",
    "ItemModelError",
    "load_item_model",
]
