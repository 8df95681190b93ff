"""Note model for FocusPad."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

DEFAULT_TITLE = "Untitled"


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class SyncState(str, Enum):
    """Whether the local copy of a note matches the remote store."""

    SYNCED = "synced"  # Last write (or load) reached the remote store
    PENDING = "pending"  # Content write in flight
    FAILED = "failed"  # Last content write failed, local copy is ahead


@dataclass
class Note:
    """Represents a note held in the remote store."""

    owner: str
    title: str = DEFAULT_TITLE
    content: str = ""
    is_pinned: bool = False
    is_public: bool = False

    # Assigned by the remote store on insert
    id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # Local-only
    sync_state: SyncState = SyncState.SYNCED

    def __post_init__(self) -> None:
        """Validate and convert fields after initialization."""
        if not self.title:
            self.title = DEFAULT_TITLE
        if isinstance(self.sync_state, str):
            self.sync_state = SyncState(self.sync_state)

    def touch(self, now: Optional[datetime] = None) -> datetime:
        """Refresh ``updated_at`` without ever moving it backwards."""
        now = now or utcnow()
        if now > self.updated_at:
            self.updated_at = now
        return self.updated_at
