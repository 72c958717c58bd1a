"""Tag catalog loading from YAML data tables."""

import logging
from importlib import resources
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from home_semantics.domain.models import TAG_DELIMITER, TagCategory, TagDefinition

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_RESOURCE = "default_catalog.yaml"


class CatalogError(Exception):
    """Raised when the tag catalog is invalid configuration."""

    pass


class TagEntry(BaseModel):
    """One row of a catalog file."""

    id: str
    category: str
    label: str
    description: str = ""
    synonyms: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("id", "category")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    def to_definition(self) -> TagDefinition:
        """Convert to an immutable TagDefinition."""
        try:
            category = TagCategory.parse(self.category)
        except ValueError as e:
            raise CatalogError(f"Tag {self.id!r}: {e}") from e

        definition = TagDefinition(
            id=self.id,
            category=category,
            label=self.label,
            description=self.description,
            synonyms={
                locale: tuple(s.strip() for s in entries if s.strip())
                for locale, entries in self.synonyms.items()
            },
        )
        check_definition(definition)
        return definition


def check_definition(definition: TagDefinition) -> None:
    """Reject definitions that cannot be indexed.

    Raises:
        CatalogError: If the category is missing or the id has no usable segments.
    """
    if not isinstance(definition.category, TagCategory):
        raise CatalogError(f"Tag {definition.id!r} has no valid category")
    if not definition.id:
        raise CatalogError("Tag definition with empty id")
    if any(not segment for segment in definition.id.split(TAG_DELIMITER)):
        raise CatalogError(f"Malformed tag id {definition.id!r}: empty segment")
    if any(ch.isspace() for ch in definition.id):
        raise CatalogError(f"Malformed tag id {definition.id!r}: contains whitespace")


def parse_catalog(data: object, source: str = "<memory>") -> list[TagDefinition]:
    """Parse catalog data (the 'tags' list of a catalog document).

    Args:
        data: Parsed YAML document.
        source: Source name for error messages.

    Returns:
        Definitions in document order.

    Raises:
        CatalogError: If the document is malformed.
    """
    if not isinstance(data, dict) or not isinstance(data.get("tags"), list):
        raise CatalogError(f"{source}: expected a mapping with a 'tags' list")

    definitions: list[TagDefinition] = []
    for index, raw in enumerate(data["tags"]):
        if not isinstance(raw, dict):
            raise CatalogError(f"{source}: entry {index} is not a mapping")
        try:
            entry = TagEntry.model_validate(raw)
        except ValidationError as e:
            raise CatalogError(f"{source}: invalid entry {index}: {e}") from e
        definitions.append(entry.to_definition())

    return definitions


def load_catalog(path: Path) -> list[TagDefinition]:
    """Load a tag catalog from a YAML file.

    Args:
        path: Path to the catalog file.

    Returns:
        Definitions in file order.

    Raises:
        CatalogError: If the file is missing or invalid.
    """
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogError(f"Failed to parse catalog {path}: {e}") from e

    definitions = parse_catalog(data, str(path))
    logger.info("Loaded %d tag definitions from %s", len(definitions), path)
    return definitions


def load_default_catalog() -> list[TagDefinition]:
    """Load the catalog bundled with the package."""
    text = (
        resources.files("home_semantics.tags")
        .joinpath(DEFAULT_CATALOG_RESOURCE)
        .read_text(encoding="utf-8")
    )
    return parse_catalog(yaml.safe_load(text), DEFAULT_CATALOG_RESOURCE)
