"""Local overlay holding the user-defined order of pinned notes."""

import json
import logging
import sys
from typing import Optional

from focuspad.database.repository import LocalKeyValueStore, LocalPersistenceError

logger = logging.getLogger(__name__)

# Sorts notes that were never explicitly ordered after every ordered one
UNORDERED_INDEX = sys.maxsize

DEFAULT_PIN_ORDER_KEY = "focuspad_pin_order"


class PinOrderOverlay:
    """Ordered list of pinned note ids, persisted locally.

    The remote store only knows whether a note is pinned; the order lives
    here. Ids of deleted notes may linger and are ignored by callers. Each id
    appears at most once.

    Args:
        store (LocalKeyValueStore): Local storage owning the key
        key (str): Storage key of the JSON array
    """

    def __init__(self, store: LocalKeyValueStore, key: str = DEFAULT_PIN_ORDER_KEY):
        self.store = store
        self.key = key
        self._order: list[str] = []

    @property
    def order(self) -> list[str]:
        """Copy of the current order."""
        return list(self._order)

    def __contains__(self, note_id: object) -> bool:
        return note_id in self._order

    def load(self) -> list[str]:
        """Read the persisted order, starting empty when it is absent or malformed."""
        try:
            self._order = self._decode(self.store.get(self.key))
        except LocalPersistenceError as e:
            logger.warning("Ignoring stored pin order: %s", e)
            self._order = []
        return self.order

    def index_of(self, note_id: str) -> int:
        """Position of *note_id*, or UNORDERED_INDEX when it is not ordered."""
        try:
            return self._order.index(note_id)
        except ValueError:
            return UNORDERED_INDEX

    def add(self, note_id: str) -> None:
        """Append *note_id* unless it is already ordered."""
        if note_id in self._order:
            return
        self._order.append(note_id)
        self._save()

    def remove(self, note_id: str) -> None:
        """Drop every occurrence of *note_id*."""
        self._order = [x for x in self._order if x != note_id]
        self._save()

    def _save(self) -> None:
        self.store.set(self.key, json.dumps(self._order))

    @staticmethod
    def _decode(raw: Optional[str]) -> list[str]:
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise LocalPersistenceError(f"Invalid JSON: {e}") from e
        if not isinstance(data, list):
            raise LocalPersistenceError(f"Expected a list, got {type(data).__name__}")

        order: list[str] = []
        for item in data:
            if isinstance(item, bool) or not isinstance(item, (str, int)):
                continue
            note_id = str(item)
            if note_id not in order:
                order.append(note_id)
        return order
