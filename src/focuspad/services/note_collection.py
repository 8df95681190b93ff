"""In-memory collection of the notes of one session."""

import logging
from typing import Iterator, Optional

from focuspad.models.note import Note
from focuspad.services.pin_order import PinOrderOverlay
from focuspad.services.remote_store import RemoteError, RemoteStore

logger = logging.getLogger(__name__)


class NoteCollection:
    """Ordered notes plus the id of the note being edited.

    New notes are prepended so they show first whatever their timestamps say.
    The collection is resorted by ``updated_at`` only after a title change;
    content autosave leaves the order alone so the note being edited does not
    jump around.
    """

    def __init__(self, notes: Optional[list[Note]] = None):
        self._notes: list[Note] = []
        self.active_id: Optional[str] = None
        for note in notes or []:
            self.append(note)

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(list(self._notes))

    def __contains__(self, note_id: object) -> bool:
        return self.find_by_id(note_id) is not None  # type: ignore[arg-type]

    @property
    def notes(self) -> list[Note]:
        """Copy of the notes in display order."""
        return list(self._notes)

    @property
    def ids(self) -> list[str]:
        return [note.id for note in self._notes if note.id is not None]

    async def load(self, store: RemoteStore, owner: str) -> bool:
        """Replace the collection with every note of *owner*.

        Fails closed: on a remote error the collection is left empty.

        Returns:
            True if the notes were loaded
        """
        self._notes = []
        try:
            notes = await store.query_all(owner)
        except RemoteError as e:
            logger.error("Loading notes failed: %s", e)
            return False

        for note in notes:
            if note.id in self:
                logger.warning("Skipping duplicate note %s from remote store", note.id)
                continue
            self._notes.append(note)
        logger.info("Loaded %d notes", len(self._notes))
        return True

    def get_active(self) -> Optional[Note]:
        """The note being edited, if any."""
        if self.active_id is None:
            return None
        return self.find_by_id(self.active_id)

    def find_by_id(self, note_id: str) -> Optional[Note]:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def first(self) -> Optional[Note]:
        return self._notes[0] if self._notes else None

    def prepend(self, note: Note) -> None:
        """Insert a newly created note at the top."""
        self._check_new(note)
        self._notes.insert(0, note)

    def append(self, note: Note) -> None:
        self._check_new(note)
        self._notes.append(note)

    def remove(self, note_id: str) -> Optional[Note]:
        """Remove and return the note with *note_id*."""
        note = self.find_by_id(note_id)
        if note is not None:
            self._notes.remove(note)
        return note

    def resort(self) -> None:
        """Order by ``updated_at``, newest first (stable for ties)."""
        self._notes.sort(key=lambda note: note.updated_at, reverse=True)

    def display_order(self, pins: PinOrderOverlay) -> list[Note]:
        """Pinned notes in pin order, then the rest in collection order."""
        pinned = [note for note in self._notes if note.is_pinned]
        pinned.sort(key=lambda note: pins.index_of(note.id))
        return pinned + [note for note in self._notes if not note.is_pinned]

    def _check_new(self, note: Note) -> None:
        if note.id is None:
            raise ValueError("Note has no id; insert it into the remote store first")
        if note.id in self:
            raise ValueError(f"Note {note.id} is already in the collection")
