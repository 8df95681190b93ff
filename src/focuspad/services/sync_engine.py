"""Synchronization engine keeping the session's notes in step with the remote store."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Coroutine, Optional

from focuspad.models.note import DEFAULT_TITLE, Note, SyncState, utcnow
from focuspad.services.clock import Clock
from focuspad.services.note_collection import NoteCollection
from focuspad.services.pin_order import PinOrderOverlay
from focuspad.services.remote_store import RemoteError, RemoteStore
from focuspad.services.sanitizer import strip_transient_markup
from focuspad.services.save_scheduler import DEFAULT_SAVE_DELAY, SaveScheduler
from focuspad.services.session import Session

logger = logging.getLogger(__name__)

ContentSource = Callable[[], Optional[str]]


class SyncErrorKind(str, Enum):
    """Why an engine operation failed."""

    NOT_AUTHENTICATED = "not_authenticated"
    STORE_UNAVAILABLE = "store_unavailable"
    NOT_FOUND = "not_found"
    REMOTE = "remote"


class SyncError(Exception):
    """Base class for failures detected by the engine itself."""

    kind = SyncErrorKind.REMOTE


class NotAuthenticated(SyncError):
    """No principal is available for an operation requiring one."""

    kind = SyncErrorKind.NOT_AUTHENTICATED


class StoreUnavailable(SyncError):
    """No remote store is configured."""

    kind = SyncErrorKind.STORE_UNAVAILABLE


class NoteNotFound(SyncError):
    """The note is not in the session's collection."""

    kind = SyncErrorKind.NOT_FOUND


@dataclass
class SyncResult:
    """Result of an engine operation.

    ``blocking`` marks failures the user must acknowledge (create and delete);
    other failures are informational because the local state already shows
    the change. ``deleted`` is set when a delete went through but the
    replacement note for an emptied collection could not be created.
    """

    success: bool
    note_id: Optional[str] = None
    error: Optional[str] = None
    kind: Optional[SyncErrorKind] = None
    blocking: bool = False
    deleted: bool = False

    @classmethod
    def ok(cls, note_id: Optional[str] = None) -> "SyncResult":
        return cls(success=True, note_id=note_id)

    @classmethod
    def failed(
        cls, error: Exception, note_id: Optional[str] = None, blocking: bool = False
    ) -> "SyncResult":
        kind = error.kind if isinstance(error, SyncError) else SyncErrorKind.REMOTE
        return cls(
            success=False,
            note_id=note_id,
            error=str(error),
            kind=kind,
            blocking=blocking,
        )


class SyncListener:
    """Receives change notifications from the engine.

    The presentation layer subclasses this; the defaults ignore every event.
    Listeners must not mutate the collection themselves.
    """

    def on_unsaved_changed(self, note_id: str, is_unsaved: bool) -> None:
        pass

    def on_notes_changed(self) -> None:
        pass

    def on_active_changed(self, note_id: Optional[str]) -> None:
        pass


class SyncEngine:
    """Note lifecycle operations with optimistic local state.

    Local state is updated before the remote call (content autosave) or
    mirrored right after it succeeds (title, pin, publish, create, delete).
    Remote failures are logged and returned as a failed SyncResult; local
    state is never rolled back. Nothing raises past this class.

    Args:
        session: Session context of the signed-in principal
        store: Remote note store, or None when none is configured
        content_source: Returns the current editor markup
        listener: Receives change notifications
        clock: Timer source for autosave (defaults to the event loop)
        save_delay: Autosave idle window in seconds
        now: Time source for ``updated_at``
    """

    def __init__(
        self,
        session: Session,
        store: Optional[RemoteStore],
        content_source: Optional[ContentSource] = None,
        listener: Optional[SyncListener] = None,
        clock: Optional[Clock] = None,
        save_delay: float = DEFAULT_SAVE_DELAY,
        now: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.store = store
        self.content_source = content_source
        self.listener = listener or SyncListener()
        self._now = now
        self._save_error: Optional[Exception] = None
        self.scheduler = SaveScheduler(
            self._write_back,
            clock=clock,
            delay=save_delay,
            on_unsaved_changed=self.listener.on_unsaved_changed,
        )

    @property
    def collection(self) -> NoteCollection:
        return self.session.collection

    @property
    def pins(self) -> PinOrderOverlay:
        return self.session.pins

    @property
    def active_id(self) -> Optional[str]:
        return self.collection.active_id

    @property
    def unsaved_id(self) -> Optional[str]:
        return self.scheduler.unsaved_id

    def get_active(self) -> Optional[Note]:
        return self.collection.get_active()

    def ordered_notes(self) -> list[Note]:
        """Notes as the sidebar shows them: pinned first in pin order."""
        return self.collection.display_order(self.pins)

    # ==================== Session ====================

    async def start(self) -> SyncResult:
        """Load overlays and notes; make sure there is a note to edit."""
        self.pins.load()
        self.session.preferences.load()
        try:
            owner = self._require_owner()
            store = self._require_store()
        except SyncError as e:
            logger.error("Cannot start session: %s", e)
            return SyncResult.failed(e, blocking=True)

        await self.collection.load(store, owner)
        first = self.collection.first()
        if first is None:
            return await self.create_note(DEFAULT_TITLE)

        self._set_active(first.id)
        self.listener.on_notes_changed()
        return SyncResult.ok(first.id)

    async def close(self) -> None:
        """Flush pending edits and wait for writes still in flight."""
        await self.flush()
        await self.scheduler.wait_idle()

    # ==================== Lifecycle ====================

    async def create_note(self, title: str = DEFAULT_TITLE) -> SyncResult:
        """Create a note, put it at the top and make it active."""
        await self.flush()
        try:
            owner = self._require_owner()
            store = self._require_store()
            note = await store.insert(Note(owner=owner, title=title or DEFAULT_TITLE))
        except (SyncError, RemoteError) as e:
            logger.error("Creating note failed: %s", e)
            return SyncResult.failed(e, blocking=True)

        try:
            self.collection.prepend(note)
        except ValueError as e:
            logger.error("Store returned an unusable note: %s", e)
            return SyncResult.failed(
                RemoteError(str(e), code="duplicate_id"), note.id, blocking=True
            )
        self._set_active(note.id)
        self.listener.on_notes_changed()
        logger.info("Created note %s", note.id)
        return SyncResult.ok(note.id)

    async def switch_note(self, note_id: str) -> SyncResult:
        """Make *note_id* active, saving the current note first."""
        if note_id == self.active_id:
            return SyncResult.ok(note_id)
        if note_id not in self.collection:
            return SyncResult.failed(NoteNotFound(f"Note {note_id} not found"), note_id)

        await self.flush()
        self._set_active(note_id)
        return SyncResult.ok(note_id)

    async def delete_note(self, note_id: str) -> SyncResult:
        """Delete a note; the collection never ends up empty."""
        if self.unsaved_id == note_id:
            await self.flush()
        try:
            store = self._require_store()
            await store.delete(note_id)
        except (SyncError, RemoteError) as e:
            logger.error("Deleting note %s failed: %s", note_id, e)
            return SyncResult.failed(e, note_id, blocking=True)

        self.collection.remove(note_id)
        logger.info("Deleted note %s", note_id)

        if self.active_id == note_id:
            first = self.collection.first()
            if first is not None:
                self._set_active(first.id)
            else:
                self._set_active(None)
                result = await self.create_note(DEFAULT_TITLE)
                if not result.success:
                    self.listener.on_notes_changed()
                    return SyncResult(
                        success=False,
                        note_id=note_id,
                        error=(
                            f"Deleted note {note_id} but creating a new note failed: "
                            f"{result.error}"
                        ),
                        kind=result.kind,
                        blocking=True,
                        deleted=True,
                    )

        self.listener.on_notes_changed()
        return SyncResult.ok(note_id)

    async def update_title(self, note_id: str, title: str) -> SyncResult:
        """Rename a note and resort the collection."""
        title = title or DEFAULT_TITLE
        now = self._now()
        try:
            store = self._require_store()
            await store.update(note_id, {"title": title, "updated_at": now})
        except (SyncError, RemoteError) as e:
            logger.error("Renaming note %s failed: %s", note_id, e)
            return SyncResult.failed(e, note_id)

        note = self.collection.find_by_id(note_id)
        if note is not None:
            note.title = title
            note.touch(now)
        self.collection.resort()
        self.listener.on_notes_changed()
        return SyncResult.ok(note_id)

    async def toggle_pin(self, note_id: str, pinned: bool) -> SyncResult:
        """Pin or unpin a note.

        The remote flag and the local pin order change together: when the
        remote update fails neither is touched.
        """
        now = self._now()
        try:
            store = self._require_store()
            await store.update(note_id, {"is_pinned": pinned, "updated_at": now})
        except (SyncError, RemoteError) as e:
            logger.error("Toggling pin on note %s failed: %s", note_id, e)
            return SyncResult.failed(e, note_id)

        note = self.collection.find_by_id(note_id)
        if note is not None:
            note.is_pinned = pinned
            note.touch(now)
        if pinned:
            self.pins.add(note_id)
        else:
            self.pins.remove(note_id)
        self.listener.on_notes_changed()
        return SyncResult.ok(note_id)

    async def toggle_public(self, note_id: str, published: bool) -> SyncResult:
        """Publish or unpublish a note."""
        now = self._now()
        try:
            store = self._require_store()
            await store.update(note_id, {"is_public": published, "updated_at": now})
        except (SyncError, RemoteError) as e:
            logger.error("Toggling public on note %s failed: %s", note_id, e)
            return SyncResult.failed(e, note_id)

        note = self.collection.find_by_id(note_id)
        if note is not None:
            note.is_public = published
            note.touch(now)
        self.listener.on_notes_changed()
        return SyncResult.ok(note_id)

    # ==================== Autosave ====================

    def request_save(self) -> None:
        """Called on every content edit of the active note.

        With autosave turned off in the preferences the note is only marked
        unsaved until the next ``flush``.
        """
        if self.active_id is None:
            return
        auto_save = self.session.preferences.preferences.auto_save
        self.scheduler.request_save(self.active_id, arm=auto_save)

    async def flush(self) -> SyncResult:
        """Write back pending edits of the active note now."""
        note_id = self.unsaved_id
        if await self.scheduler.flush():
            return SyncResult.ok(note_id)
        error = self._save_error or RemoteError(f"Saving note {note_id} failed")
        return SyncResult.failed(error, note_id)

    def cancel_save(self) -> None:
        """Abandon pending edits without writing them."""
        self.scheduler.cancel()

    def _write_back(self, note_id: str) -> Optional[Coroutine[Any, Any, bool]]:
        """Capture the editor content into *note_id* and return the remote write.

        Runs synchronously inside the timer callback or ``flush`` so the
        content read always belongs to the note that was unsaved.
        """
        note = self.collection.find_by_id(note_id)
        if note is None:
            logger.debug("Note %s is gone, nothing to save", note_id)
            return None
        raw = self.content_source() if self.content_source else None
        if raw is None:
            return None

        content = strip_transient_markup(raw)
        if content == note.content and note.sync_state is SyncState.SYNCED:
            logger.debug("Note %s unchanged, skipping write", note_id)
            return None

        note.content = content
        updated_at = note.touch(self._now())
        note.sync_state = SyncState.PENDING
        return self._send_content(note, content, updated_at)

    async def _send_content(self, note: Note, content: str, updated_at: datetime) -> bool:
        try:
            store = self._require_store()
            await store.update(note.id, {"content": content, "updated_at": updated_at})
        except (SyncError, RemoteError) as e:
            logger.error("Saving note %s failed: %s", note.id, e)
            self._save_error = e
            note.sync_state = SyncState.FAILED
            return False

        # A later edit may already be on its way
        if note.content == content:
            note.sync_state = SyncState.SYNCED
        return True

    # ==================== Helpers ====================

    def _require_owner(self) -> str:
        owner = self.session.owner_id
        if not owner:
            raise NotAuthenticated("Not logged in")
        return owner

    def _require_store(self) -> RemoteStore:
        if self.store is None:
            raise StoreUnavailable("Remote store is not configured")
        return self.store

    def _set_active(self, note_id: Optional[str]) -> None:
        if self.collection.active_id == note_id:
            return
        self.collection.active_id = note_id
        self.listener.on_active_changed(note_id)
