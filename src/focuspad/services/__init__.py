"""Services for FocusPad."""

from focuspad.services.clock import LoopClock, ManualClock
from focuspad.services.note_collection import NoteCollection
from focuspad.services.pin_order import PinOrderOverlay
from focuspad.services.preferences import PreferencesOverlay
from focuspad.services.remote_store import RemoteError, RemoteStore, ValidationError
from focuspad.services.save_scheduler import SaveScheduler
from focuspad.services.session import Principal, Session
from focuspad.services.sync_engine import SyncEngine, SyncListener, SyncResult

__all__ = [
    "LoopClock",
    "ManualClock",
    "NoteCollection",
    "PinOrderOverlay",
    "PreferencesOverlay",
    "Principal",
    "RemoteError",
    "RemoteStore",
    "SaveScheduler",
    "Session",
    "SyncEngine",
    "SyncListener",
    "SyncResult",
    "ValidationError",
]
