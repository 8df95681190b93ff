"""Pytest fixtures for FocusPad tests."""

import asyncio
import itertools
import tempfile
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional
from unittest.mock import MagicMock

import pytest

from focuspad.database.repository import KeyValueRepository
from focuspad.models.note import Note
from focuspad.services.clock import ManualClock
from focuspad.services.remote_store import RemoteError
from focuspad.services.session import Principal, Session
from focuspad.services.sync_engine import SyncEngine, SyncListener

OWNER = "user-1"
BASE_TIME = datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)


def make_note(
    note_id: str,
    title: str = "Note",
    content: str = "",
    minutes: int = 0,
    owner: str = OWNER,
    **kwargs: Any,
) -> Note:
    """Helper to create a stored note, ``minutes`` after BASE_TIME."""
    stamp = BASE_TIME + timedelta(minutes=minutes)
    return Note(
        id=note_id,
        owner=owner,
        title=title,
        content=content,
        created_at=stamp,
        updated_at=stamp,
        **kwargs,
    )


class FakeRemoteStore:
    """In-memory RemoteStore recording every call.

    ``fail_on`` names methods that raise RemoteError; ``gate`` holds every
    call until the event is set.
    """

    def __init__(self) -> None:
        self.notes: dict[str, Note] = {}
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self.gate: Optional[asyncio.Event] = None
        self._next_id = 1

    def seed(self, *notes: Note) -> None:
        for note in notes:
            self.notes[note.id] = replace(note)
            if note.id.isdigit():
                self._next_id = max(self._next_id, int(note.id) + 1)

    def updates(self, note_id: Optional[str] = None) -> list[dict[str, Any]]:
        return [
            call[2]
            for call in self.calls
            if call[0] == "update" and (note_id is None or call[1] == note_id)
        ]

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    async def _enter(self, method: str, *args: Any) -> None:
        self.calls.append((method, *args))
        if self.gate is not None:
            await self.gate.wait()
        if method in self.fail_on:
            raise RemoteError(f"{method} failed", status_code=500)

    async def query_all(self, owner: str) -> list[Note]:
        await self._enter("query_all", owner)
        notes = [replace(n) for n in self.notes.values() if n.owner == owner]
        return sorted(notes, key=lambda n: n.updated_at, reverse=True)

    async def insert(self, note: Note) -> Note:
        await self._enter("insert", note)
        stored = replace(note, id=str(self._next_id))
        self._next_id += 1
        self.notes[stored.id] = stored
        return replace(stored)

    async def update(self, note_id: str, fields: dict[str, Any]) -> None:
        await self._enter("update", note_id, dict(fields))
        if note_id not in self.notes:
            raise RemoteError(f"Note {note_id} not found", status_code=404, code="not_found")
        for name, value in fields.items():
            setattr(self.notes[note_id], name, value)

    async def delete(self, note_id: str) -> None:
        await self._enter("delete", note_id)
        if self.notes.pop(note_id, None) is None:
            raise RemoteError(f"Note {note_id} not found", status_code=404, code="not_found")


class EditorStub:
    """Content source holding whatever the test typed."""

    def __init__(self, content: Optional[str] = None):
        self.content = content

    def __call__(self) -> Optional[str]:
        return self.content


class Ticker:
    """Time source advancing one second per call, starting a day after BASE_TIME."""

    def __init__(self) -> None:
        self._seconds = itertools.count()

    def __call__(self) -> datetime:
        return BASE_TIME + timedelta(days=1, seconds=next(self._seconds))


@pytest.fixture
def temp_db_path():
    """Provide a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def local_store(temp_db_path):
    """Provide local key/value storage in a temporary database."""
    return KeyValueRepository(f"sqlite:///{temp_db_path}")


@pytest.fixture
def remote():
    return FakeRemoteStore()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def editor():
    return EditorStub()


@pytest.fixture
def listener():
    return MagicMock(spec=SyncListener)


@pytest.fixture
def session(local_store):
    return Session(Principal(id=OWNER), local_store)


@pytest.fixture
def engine(session, remote, editor, listener, clock):
    """SyncEngine on the fake store, a manual clock and a ticking time source."""
    return SyncEngine(
        session,
        remote,
        content_source=editor,
        listener=listener,
        clock=clock,
        now=Ticker(),
    )
