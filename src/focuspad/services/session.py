"""Per-principal session context."""

from dataclasses import dataclass
from typing import Optional

from focuspad.database.repository import LocalKeyValueStore
from focuspad.services.note_collection import NoteCollection
from focuspad.services.pin_order import DEFAULT_PIN_ORDER_KEY, PinOrderOverlay
from focuspad.services.preferences import DEFAULT_SETTINGS_KEY, PreferencesOverlay


@dataclass(frozen=True)
class Principal:
    """The authenticated user a session belongs to."""

    id: str
    email: Optional[str] = None


class Session:
    """State owned by one signed-in session.

    Created by the caller (one per authenticated session) and handed to the
    SyncEngine; nothing here is process-wide.

    Args:
        principal: Signed-in user, or None when nobody is signed in
        local_store: Durable local storage for the overlays
        pin_order_key: Storage key of the pin order
        settings_key: Storage key of the editor preferences
    """

    def __init__(
        self,
        principal: Optional[Principal],
        local_store: LocalKeyValueStore,
        pin_order_key: str = DEFAULT_PIN_ORDER_KEY,
        settings_key: str = DEFAULT_SETTINGS_KEY,
    ):
        self.principal = principal
        self.collection = NoteCollection()
        self.pins = PinOrderOverlay(local_store, pin_order_key)
        self.preferences = PreferencesOverlay(local_store, settings_key)

    @property
    def owner_id(self) -> Optional[str]:
        return self.principal.id if self.principal else None
