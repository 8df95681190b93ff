"""Unit tests for PinOrderOverlay."""

import json

import pytest

from focuspad.services.pin_order import (
    DEFAULT_PIN_ORDER_KEY,
    UNORDERED_INDEX,
    PinOrderOverlay,
)


@pytest.fixture
def overlay(local_store):
    """Provide a loaded, empty overlay."""
    overlay = PinOrderOverlay(local_store)
    overlay.load()
    return overlay


class TestLoad:
    """Tests for reading the persisted order."""

    def test_absent_key_is_empty(self, overlay):
        """Test that a fresh store yields no order."""
        assert overlay.order == []

    def test_loads_stored_order(self, local_store):
        """Test reading a stored JSON array."""
        local_store.set(DEFAULT_PIN_ORDER_KEY, '["b", "a"]')

        assert PinOrderOverlay(local_store).load() == ["b", "a"]

    def test_numeric_ids_become_strings(self, local_store):
        """Test that numeric ids from older blobs are kept."""
        local_store.set(DEFAULT_PIN_ORDER_KEY, "[3, 1]")

        assert PinOrderOverlay(local_store).load() == ["3", "1"]

    def test_duplicates_collapse(self, local_store):
        """Test that a blob with repeated ids keeps the first occurrence."""
        local_store.set(DEFAULT_PIN_ORDER_KEY, '["a", "b", "a"]')

        assert PinOrderOverlay(local_store).load() == ["a", "b"]

    @pytest.mark.parametrize("raw", ["not json", '{"a": 1}', '"a"', "null"])
    def test_malformed_blob_is_empty(self, local_store, raw):
        """Test that bad data never blocks startup."""
        local_store.set(DEFAULT_PIN_ORDER_KEY, raw)

        assert PinOrderOverlay(local_store).load() == []

    def test_custom_key(self, local_store):
        """Test that the overlay only reads its own key."""
        local_store.set("other", '["x"]')

        assert PinOrderOverlay(local_store, key="other").load() == ["x"]
        assert PinOrderOverlay(local_store).load() == []


class TestMutations:
    """Tests for adding and removing ids."""

    def test_add_appends(self, overlay):
        """Test that ids are appended in pin order."""
        overlay.add("a")
        overlay.add("b")

        assert overlay.order == ["a", "b"]

    def test_add_is_unique(self, overlay):
        """Test that adding twice keeps one entry."""
        overlay.add("a")
        overlay.add("a")

        assert overlay.order == ["a"]

    def test_remove(self, overlay):
        """Test removing an id."""
        overlay.add("a")
        overlay.add("b")

        overlay.remove("a")

        assert overlay.order == ["b"]
        assert "a" not in overlay

    def test_remove_absent(self, overlay):
        """Test that removing an unknown id is harmless."""
        overlay.remove("zzz")

        assert overlay.order == []

    def test_mutations_persist_immediately(self, overlay, local_store):
        """Test that every change is written through."""
        overlay.add("a")
        assert json.loads(local_store.get(DEFAULT_PIN_ORDER_KEY)) == ["a"]

        overlay.remove("a")
        assert json.loads(local_store.get(DEFAULT_PIN_ORDER_KEY)) == []

    def test_order_is_a_copy(self, overlay):
        """Test that callers cannot mutate the overlay through ``order``."""
        overlay.order.append("x")

        assert overlay.order == []


class TestIndexOf:
    """Tests for sort positions."""

    def test_positions(self, overlay):
        """Test positions of ordered ids."""
        overlay.add("a")
        overlay.add("b")

        assert overlay.index_of("a") == 0
        assert overlay.index_of("b") == 1

    def test_unordered_sorts_last(self, overlay):
        """Test that a never pinned id sorts after every ordered one."""
        for note_id in ("a", "b", "c"):
            overlay.add(note_id)

        sentinel = overlay.index_of("never-pinned")

        assert sentinel == UNORDERED_INDEX
        assert all(sentinel > overlay.index_of(x) for x in overlay.order)
