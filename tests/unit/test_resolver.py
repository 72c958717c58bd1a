"""Unit tests for SemanticTypeResolver."""

import pytest

from home_semantics.domain.models import TagCategory, TagDefinition
from home_semantics.semantic.resolver import (
    COMMAND_POINT_ID,
    SENSOR_POINT_ID,
    SemanticTypeResolver,
)
from home_semantics.tags.registry import TagRegistry


class TestResolveCategory:
    """Tests for the single semantic type of an item."""

    def test_location_tag(self, resolver: SemanticTypeResolver, make_item) -> None:
        """Test that a Location tag classifies the item as that Location."""
        item = make_item("Bedroom", "Bedroom", group=True)

        assert resolver.resolve_category(item).id == "Location_Room_Bedroom"

    def test_full_id_and_suffix_are_equivalent(
        self, resolver: SemanticTypeResolver, make_item
    ) -> None:
        """Test that a tag may be given by any of its suffixes."""
        short = resolver.resolve_category(make_item("A", "FrontDoor"))
        full = resolver.resolve_category(make_item("B", "Equipment_Door_FrontDoor"))

        assert short == full

    def test_lexicographic_first_wins(self, resolver: SemanticTypeResolver, make_item) -> None:
        """Test that the smallest tag id decides between two types."""
        item = make_item("Room", "Kitchen", "Bedroom")

        assert resolver.resolve_category(item).id == "Location_Room_Bedroom"

    def test_property_is_skipped(self, resolver: SemanticTypeResolver, make_item) -> None:
        """Test that a Property tag never becomes the semantic type."""
        item = make_item("Lamp", "Light", "Lightbulb")

        assert resolver.resolve_category(item).id == "Equipment_Lightbulb"
        assert resolver.resolve_property(item) is None

    def test_point_with_property(self, resolver: SemanticTypeResolver, make_item) -> None:
        """Test that a Point gets the Property it relates to."""
        item = make_item("Heating", "Switch", "Temperature")

        assert resolver.resolve_category(item).id == "Point_Command_Switch"
        assert resolver.resolve_property(item).id == "Property_Temperature"

    def test_shared_suffix_resolves_to_later_category(
        self, resolver: SemanticTypeResolver, make_item
    ) -> None:
        """Test that 'Sensor' means Point_Sensor, not Equipment_Sensor."""
        item = make_item("Motion", "Sensor")

        assert resolver.resolve_category(item).id == "Point_Sensor"

    def test_unknown_tags_ignored(self, resolver: SemanticTypeResolver, make_item) -> None:
        """Test that unknown tags are skipped, not treated as errors."""
        item = make_item("Lamp", "Unknown", "Lightbulb", "zzz")

        assert resolver.resolve_category(item).id == "Equipment_Lightbulb"

    @pytest.mark.parametrize("tags", [(), ("Unknown",), ("Bed room",)])
    def test_unclassified(self, resolver: SemanticTypeResolver, make_item, tags) -> None:
        """Test that items without known non-Property tags resolve to nothing."""
        item = make_item("Plain", *tags)

        assert resolver.resolve_category(item) is None
        assert resolver.category_of(item) is None

    def test_result_independent_of_tag_order(
        self, resolver: SemanticTypeResolver, make_item
    ) -> None:
        """Test that classification is deterministic for any insertion order."""
        tags = ["Switch", "Bedroom", "Lightbulb", "Temperature", "FrontDoor"]
        results = {
            resolver.resolve_category(make_item("X", *tags[i:], *tags[:i])).id
            for i in range(len(tags))
        }

        # 'Bedroom' < 'FrontDoor' < 'Lightbulb' < 'Switch'
        assert results == {"Location_Room_Bedroom"}


class TestPointFallback:
    """Tests for items that only carry Property tags."""

    def test_read_only_becomes_sensor(self, resolver: SemanticTypeResolver, make_item) -> None:
        """Test that a read-only Property-only item is a sensor Point."""
        item = make_item("Temp", "Temperature", read_only=True)

        assert resolver.resolve_category(item).id == SENSOR_POINT_ID
        assert resolver.resolve_property(item).id == "Property_Temperature"

    def test_writable_becomes_command(self, resolver: SemanticTypeResolver, make_item) -> None:
        """Test that a writable Property-only item is a command Point."""
        item = make_item("Dimmer", "Light")

        assert resolver.resolve_category(item).id == COMMAND_POINT_ID

    def test_read_only_override(self, resolver: SemanticTypeResolver, make_item) -> None:
        """Test that the caller may override the item's read-only flag."""
        item = make_item("Dimmer", "Light")

        assert resolver.resolve_category(item, read_only=True).id == SENSOR_POINT_ID

    def test_fallback_synthesized_when_missing(self, make_item) -> None:
        """Test that the fallback Point exists even if the catalog lacks it."""
        registry = TagRegistry(
            [TagDefinition("Property_Temperature", TagCategory.PROPERTY, "Temperature")]
        )
        resolver = SemanticTypeResolver(registry)

        sensor = resolver.resolve_category(make_item("T", "Temperature", read_only=True))
        command = resolver.resolve_category(make_item("T", "Temperature"))

        assert sensor == TagDefinition(SENSOR_POINT_ID, TagCategory.POINT, "Sensor")
        assert command.id == COMMAND_POINT_ID
        assert command.category is TagCategory.POINT


class TestTypeSets:
    """Tests for the multi-valued queries."""

    def test_semantic_types(self, resolver: SemanticTypeResolver, make_item) -> None:
        """Test that all non-Property types are returned."""
        item = make_item("Mixed", "Bedroom", "FrontDoor", "Temperature")

        assert {d.id for d in resolver.semantic_types(item)} == {
            "Location_Room_Bedroom",
            "Equipment_Door_FrontDoor",
        }

    def test_semantic_types_fallback(self, resolver: SemanticTypeResolver, make_item) -> None:
        """Test that Property-only items report the inferred Point."""
        item = make_item("Temp", "Temperature", read_only=True)

        assert {d.id for d in resolver.semantic_types(item)} == {SENSOR_POINT_ID}

    def test_properties(self, resolver: SemanticTypeResolver, make_item) -> None:
        """Test that all Property tags are returned."""
        item = make_item("Multi", "Switch", "Light", "Temperature")

        assert {d.id for d in resolver.properties(item)} == {
            "Property_Light",
            "Property_Temperature",
        }

    def test_first_property_on_equipment(
        self, resolver: SemanticTypeResolver, make_item
    ) -> None:
        """Test that first_property ignores the semantic type."""
        item = make_item("Lamp", "Lightbulb", "Light")

        assert resolver.first_property(item).id == "Property_Light"
        assert resolver.category_of(item) is TagCategory.EQUIPMENT
