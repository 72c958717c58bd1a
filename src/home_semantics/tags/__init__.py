"""Tag catalog loading and the suffix-indexed tag registry."""

from home_semantics.tags.catalog import CatalogError, load_catalog, load_default_catalog
from home_semantics.tags.registry import SuffixCollision, TagRegistry

__all__ = ["CatalogError", "load_catalog", "load_default_catalog", "TagRegistry", "SuffixCollision"]
