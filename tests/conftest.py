"""Shared pytest fixtures for home-semantics tests."""

import pytest

from home_semantics.domain.models import Item, TagCategory, TagDefinition
from home_semantics.items.provider import InMemoryItemRegistry
from home_semantics.semantic.relations import RelationInferenceEngine
from home_semantics.semantic.resolver import SemanticTypeResolver
from home_semantics.tags.registry import TagRegistry

L = TagCategory.LOCATION
E = TagCategory.EQUIPMENT
P = TagCategory.POINT
PR = TagCategory.PROPERTY


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers.

    Note: Markers are also defined in pyproject.toml [tool.pytest.ini_options].
    This function ensures they're registered even when running pytest directly.
    """
    config.addinivalue_line("markers", "integration: tests that wire the full service together")
    config.addinivalue_line("markers", "slow: slow-running tests")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        if "/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def make_catalog() -> list[TagDefinition]:
    """A small catalog covering all four categories.

    'Sensor' is deliberately claimed by both Equipment_Sensor and Point_Sensor.
    """
    return [
        TagDefinition("Location", L, "Location"),
        TagDefinition("Location_Floor", L, "Floor"),
        TagDefinition("Location_Room", L, "Room"),
        TagDefinition(
            "Location_Room_Bedroom",
            L,
            "Bedroom",
            synonyms={"en": ("Bedroom", "Sleeping Room"), "de": ("Schlafzimmer",)},
        ),
        TagDefinition(
            "Location_Room_Kitchen",
            L,
            "Kitchen",
            synonyms={"en": ("Kitchen",), "de": ("Küche",)},
        ),
        TagDefinition("Equipment", E, "Equipment"),
        TagDefinition("Equipment_Door", E, "Door"),
        TagDefinition("Equipment_Door_FrontDoor", E, "Front Door"),
        TagDefinition("Equipment_Lightbulb", E, "Lightbulb"),
        TagDefinition("Equipment_Sensor", E, "Sensor"),
        TagDefinition("Point", P, "Point"),
        TagDefinition("Point_Command", P, "Command"),
        TagDefinition("Point_Command_Switch", P, "Switch"),
        TagDefinition("Point_Sensor", P, "Sensor"),
        TagDefinition("Point_Sensor_BinarySensor", P, "Binary Sensor"),
        TagDefinition("Property", PR, "Property"),
        TagDefinition("Property_Light", PR, "Light"),
        TagDefinition(
            "Property_Temperature",
            PR,
            "Temperature",
            synonyms={"en": ("Temperature",), "de": ("Temperatur",)},
        ),
    ]


def _item(
    name: str,
    *tags: str,
    groups: tuple[str, ...] = (),
    group: bool = False,
    read_only: bool = False,
) -> Item:
    """Build an item snapshot."""
    return Item(
        name=name,
        tags=frozenset(tags),
        group_names=groups,
        is_group=group,
        read_only=read_only,
    )


@pytest.fixture
def make_item():
    """Factory for item snapshots: make_item(name, *tags, groups=..., group=..., read_only=...)."""
    return _item


@pytest.fixture
def catalog() -> list[TagDefinition]:
    """The test catalog."""
    return make_catalog()


@pytest.fixture
def registry(catalog: list[TagDefinition]) -> TagRegistry:
    """A registry loaded with the test catalog."""
    return TagRegistry(catalog)


@pytest.fixture
def resolver(registry: TagRegistry) -> SemanticTypeResolver:
    """A resolver over the test registry."""
    return SemanticTypeResolver(registry)


@pytest.fixture
def engine(resolver: SemanticTypeResolver) -> RelationInferenceEngine:
    """A relation engine with the standard rules."""
    return RelationInferenceEngine(resolver)


@pytest.fixture
def items() -> InMemoryItemRegistry:
    """An empty in-memory item registry."""
    return InMemoryItemRegistry()
