"""Local overlay holding editor preferences."""

import logging
from typing import Any

import pydantic

from focuspad.database.repository import LocalKeyValueStore
from focuspad.models.preferences import Preferences

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_KEY = "focuspad_settings"


class PreferencesOverlay:
    """Editor preferences read once at startup and written on every change."""

    def __init__(self, store: LocalKeyValueStore, key: str = DEFAULT_SETTINGS_KEY):
        self.store = store
        self.key = key
        self.preferences = Preferences()

    def load(self) -> Preferences:
        """Read stored preferences; malformed data falls back to defaults."""
        raw = self.store.get(self.key)
        if raw:
            try:
                self.preferences = Preferences.model_validate_json(raw)
            except pydantic.ValidationError as e:
                logger.warning("Ignoring stored preferences: %s", e)
                self.preferences = Preferences()
        else:
            self.preferences = Preferences()
        return self.preferences

    def update(self, **changes: Any) -> Preferences:
        """Apply *changes* and persist immediately.

        Raises:
            pydantic.ValidationError: If a value does not fit its field
        """
        data = self.preferences.model_dump()
        data.update(changes)
        self.preferences = Preferences.model_validate(data)
        self._save()
        return self.preferences

    def reset(self) -> Preferences:
        """Restore and persist the defaults."""
        self.preferences = Preferences()
        self._save()
        return self.preferences

    def _save(self) -> None:
        self.store.set(self.key, self.preferences.model_dump_json(by_alias=True))
