"""Unit tests for PreferencesOverlay."""

import json

import pydantic
import pytest

from focuspad.models.preferences import Preferences
from focuspad.services.preferences import DEFAULT_SETTINGS_KEY, PreferencesOverlay


@pytest.fixture
def overlay(local_store):
    overlay = PreferencesOverlay(local_store)
    overlay.load()
    return overlay


class TestPreferencesModel:
    """Tests for the Preferences model."""

    def test_defaults(self):
        """Test default preferences."""
        prefs = Preferences()
        assert prefs.theme == "dark"
        assert prefs.editor_font == "Playpen Sans"
        assert prefs.editor_font_size == "18"
        assert prefs.auto_save is True

    def test_stored_key_names(self):
        """Test that stored blobs use the editor's key names."""
        data = Preferences().model_dump(by_alias=True)
        assert set(data) == {"theme", "editorFont", "editorFontSize", "autoSave"}


class TestLoad:
    """Tests for reading stored preferences."""

    def test_absent_key_gives_defaults(self, overlay):
        """Test a fresh store."""
        assert overlay.preferences == Preferences()

    def test_partial_blob_fills_defaults(self, local_store):
        """Test that missing keys take their defaults."""
        local_store.set(DEFAULT_SETTINGS_KEY, '{"theme": "light", "editorFont": "Fredoka"}')

        prefs = PreferencesOverlay(local_store).load()

        assert prefs.theme == "light"
        assert prefs.editor_font == "Fredoka"
        assert prefs.editor_font_size == "18"

    @pytest.mark.parametrize("raw", ["{broken", "[1, 2]", '{"autoSave": "sometimes"}'])
    def test_malformed_blob_gives_defaults(self, local_store, raw):
        """Test that bad data degrades to defaults."""
        local_store.set(DEFAULT_SETTINGS_KEY, raw)

        assert PreferencesOverlay(local_store).load() == Preferences()


class TestUpdate:
    """Tests for changing preferences."""

    def test_update_persists(self, overlay, local_store):
        """Test that changes are written immediately."""
        overlay.update(theme="light", editor_font_size="20")

        stored = json.loads(local_store.get(DEFAULT_SETTINGS_KEY))
        assert stored["theme"] == "light"
        assert stored["editorFontSize"] == "20"
        assert PreferencesOverlay(local_store).load().theme == "light"

    def test_invalid_update_raises(self, overlay):
        """Test that a value of the wrong type is rejected."""
        with pytest.raises(pydantic.ValidationError):
            overlay.update(auto_save="sometimes")

        assert overlay.preferences.auto_save is True

    def test_reset(self, overlay):
        """Test restoring the defaults."""
        overlay.update(theme="light")

        overlay.reset()

        assert overlay.preferences == Preferences()
