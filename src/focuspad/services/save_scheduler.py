"""Debounced autosave."""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional

from focuspad.services.clock import Clock, LoopClock, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_SAVE_DELAY = 0.5

# Captures the note synchronously; returns the remote write to await, if any
WriteBack = Callable[[str], Optional[Coroutine[Any, Any, bool]]]
UnsavedCallback = Callable[[str, bool], None]


class SaveScheduler:
    """Collapses a burst of edits into one write-back per idle period.

    One scheduler serves a whole session because only one note is edited at a
    time. ``request_save`` marks the note unsaved and (re)arms the timer; when
    the timer fires, or when ``flush`` is called directly, the unsaved marker
    is cleared at once and the write-back runs.

    The write-back is called synchronously, so it reads the editor before any
    other event can switch notes; only the remote write it returns is awaited
    later.

    Args:
        write_back: Captures the content of a note id and returns a coroutine
            performing the remote write (resolving to whether it succeeded),
            or None when there is nothing to send
        clock: Timer source (defaults to the running event loop)
        delay: Idle window in seconds
        on_unsaved_changed: Called with (note_id, is_unsaved)
    """

    def __init__(
        self,
        write_back: WriteBack,
        clock: Optional[Clock] = None,
        delay: float = DEFAULT_SAVE_DELAY,
        on_unsaved_changed: Optional[UnsavedCallback] = None,
    ):
        self.write_back = write_back
        self.clock = clock or LoopClock()
        self.delay = delay
        self.on_unsaved_changed = on_unsaved_changed
        self._timer: Optional[TimerHandle] = None
        self._unsaved_id: Optional[str] = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def unsaved_id(self) -> Optional[str]:
        """Note with edits not yet handed to the remote store."""
        return self._unsaved_id

    @property
    def is_pending(self) -> bool:
        """True while the debounce timer is armed."""
        return self._timer is not None

    def request_save(self, note_id: str, arm: bool = True) -> None:
        """Schedule a write-back of *note_id* after the idle window.

        With ``arm=False`` the note is only marked unsaved and waits for an
        explicit ``flush``.
        """
        self._cancel_timer()
        if self._unsaved_id is not None and self._unsaved_id != note_id:
            # Callers must flush before switching notes
            logger.warning("Dropping unsaved edits of %s for %s", self._unsaved_id, note_id)
        self._set_unsaved(note_id)
        if arm:
            self._timer = self.clock.call_later(self.delay, self._on_timer)

    async def flush(self) -> bool:
        """Write back the unsaved note now.

        The unsaved marker is cleared before the write-back starts, so the UI
        shows the note as saved while the request is in flight.

        Returns:
            True if there was nothing to save or the write succeeded
        """
        self._cancel_timer()
        note_id = self._unsaved_id
        if note_id is None:
            return True
        self._set_unsaved(None)
        pending = self.write_back(note_id)
        if pending is None:
            return True
        return await pending

    def cancel(self) -> None:
        """Drop the pending write-back without saving."""
        self._cancel_timer()
        self._set_unsaved(None)

    async def wait_idle(self) -> None:
        """Wait for timer-triggered write-backs that are still running."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    def _on_timer(self) -> None:
        self._timer = None
        note_id = self._unsaved_id
        if note_id is None:
            return
        self._set_unsaved(None)
        pending = self.write_back(note_id)
        if pending is None:
            return
        task = asyncio.get_running_loop().create_task(pending)
        self._inflight.add(task)
        task.add_done_callback(self._on_flush_done)

    def _on_flush_done(self, task: asyncio.Task) -> None:
        self._inflight.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Autosave failed: %s", task.exception())

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _set_unsaved(self, note_id: Optional[str]) -> None:
        previous = self._unsaved_id
        if previous == note_id:
            return
        self._unsaved_id = note_id
        if self.on_unsaved_changed is None:
            return
        if previous is not None:
            self.on_unsaved_changed(previous, False)
        if note_id is not None:
            self.on_unsaved_changed(note_id, True)
