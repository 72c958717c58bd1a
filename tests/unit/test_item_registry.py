"""Unit tests for InMemoryItemRegistry."""

import threading

import pytest

from home_semantics.domain.models import Item
from home_semantics.items.provider import InMemoryItemRegistry, ItemRegistryError


class Listener:
    """Records item change notifications."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def on_item_added(self, item: Item) -> None:
        self.calls.append(("added", item.name))

    def on_item_updated(self, old_item: Item, item: Item) -> None:
        self.calls.append(("updated", item.name))

    def on_item_removed(self, item: Item) -> None:
        self.calls.append(("removed", item.name))


class BrokenListener(Listener):
    def on_item_added(self, item: Item) -> None:
        raise RuntimeError("listener failure")


@pytest.fixture
def listener(items: InMemoryItemRegistry) -> Listener:
    listener = Listener()
    items.add_change_listener(listener)
    return listener


class TestReads:
    def test_initial_items_without_events(self, make_item) -> None:
        registry = InMemoryItemRegistry([make_item("B"), make_item("A")])

        assert [i.name for i in registry.get_all()] == ["A", "B"]
        assert len(registry) == 2
        assert "A" in registry

    def test_duplicate_initial_items(self, make_item) -> None:
        with pytest.raises(ItemRegistryError, match="Duplicate"):
            InMemoryItemRegistry([make_item("A"), make_item("A", "Lightbulb")])

    def test_get_members(self, make_item) -> None:
        registry = InMemoryItemRegistry(
            [
                make_item("Door", group=True),
                make_item("Contact", groups=("Door", "Bedroom")),
                make_item("Battery", groups=("Door",)),
                make_item("Lamp", groups=("Bedroom",)),
            ]
        )

        assert [i.name for i in registry.get_members("Door")] == ["Battery", "Contact"]
        assert [i.name for i in registry.get_members("Bedroom")] == ["Contact", "Lamp"]
        assert registry.get_members("Nothing") == []

    def test_get_unknown(self, items: InMemoryItemRegistry) -> None:
        assert items.get("Missing") is None


class TestMutations:
    def test_add(self, items: InMemoryItemRegistry, listener: Listener, make_item) -> None:
        items.add(make_item("Lamp"))

        assert items.get("Lamp") is not None
        assert listener.calls == [("added", "Lamp")]

    def test_add_existing_raises(
        self, items: InMemoryItemRegistry, listener: Listener, make_item
    ) -> None:
        items.add(make_item("Lamp"))

        with pytest.raises(ItemRegistryError, match="already exists"):
            items.add(make_item("Lamp"))
        assert listener.calls == [("added", "Lamp")]

    def test_update_returns_previous(
        self, items: InMemoryItemRegistry, listener: Listener, make_item
    ) -> None:
        original = make_item("Lamp")
        items.add(original)

        previous = items.update(make_item("Lamp", "Lightbulb"))

        assert previous == original
        assert items.get("Lamp").tags == frozenset({"Lightbulb"})
        assert listener.calls == [("added", "Lamp"), ("updated", "Lamp")]

    def test_update_missing_raises(self, items: InMemoryItemRegistry, make_item) -> None:
        with pytest.raises(ItemRegistryError, match="does not exist"):
            items.update(make_item("Lamp"))

    def test_remove(self, items: InMemoryItemRegistry, listener: Listener, make_item) -> None:
        items.add(make_item("Lamp"))

        assert items.remove("Lamp").name == "Lamp"
        assert items.remove("Lamp") is None
        assert listener.calls == [("added", "Lamp"), ("removed", "Lamp")]

    def test_replace_all(self, make_item) -> None:
        registry = InMemoryItemRegistry(
            [make_item("Keep"), make_item("Change"), make_item("Drop")]
        )
        listener = Listener()
        registry.add_change_listener(listener)

        counts = registry.replace_all(
            [make_item("Keep"), make_item("Change", "Lightbulb"), make_item("New")]
        )

        assert counts == (1, 1, 1)
        assert listener.calls == [("removed", "Drop"), ("added", "New"), ("updated", "Change")]
        assert [i.name for i in registry] == ["Change", "Keep", "New"]

    def test_replace_all_rejects_duplicates(self, items: InMemoryItemRegistry, make_item) -> None:
        with pytest.raises(ItemRegistryError):
            items.replace_all([make_item("A"), make_item("A")])


class TestListeners:
    def test_failing_listener_isolated(
        self, items: InMemoryItemRegistry, listener: Listener, make_item
    ) -> None:
        broken = BrokenListener()
        late = Listener()
        items.add_change_listener(broken)
        items.add_change_listener(late)

        items.add(make_item("Lamp"))

        assert listener.calls == [("added", "Lamp")]
        assert late.calls == [("added", "Lamp")]

    def test_remove_listener(
        self, items: InMemoryItemRegistry, listener: Listener, make_item
    ) -> None:
        items.remove_change_listener(listener)
        items.remove_change_listener(listener)

        items.add(make_item("Lamp"))

        assert listener.calls == []

    def test_listener_added_once(
        self, items: InMemoryItemRegistry, listener: Listener, make_item
    ) -> None:
        items.add_change_listener(listener)

        items.add(make_item("Lamp"))

        assert listener.calls == [("added", "Lamp")]


class TestFrozen:
    def test_frozen_blocks_mutations(self, items: InMemoryItemRegistry, make_item) -> None:
        """Test that writers wait until the frozen block exits."""
        started = threading.Event()

        def writer() -> None:
            started.set()
            items.add(make_item("Lamp"))

        with items.frozen():
            thread = threading.Thread(target=writer)
            thread.start()
            started.wait(timeout=5)
            thread.join(timeout=0.2)
            assert thread.is_alive()
            assert "Lamp" not in items

        thread.join(timeout=5)
        assert "Lamp" in items

    def test_frozen_is_reentrant(self, items: InMemoryItemRegistry, make_item) -> None:
        with items.frozen():
            items.add(make_item("Lamp"))

        assert "Lamp" in items
