"""Data models for FocusPad."""

from focuspad.models.note import DEFAULT_TITLE, Note, SyncState
from focuspad.models.preferences import Preferences

__all__ = ["DEFAULT_TITLE", "Note", "Preferences", "SyncState"]
