"""Remote note store protocol and errors."""

from typing import Any, Protocol

from focuspad.models.note import Note


class RemoteError(Exception):
    """Exception raised when the remote store fails.

    Covers network failures, missing records and store-side rejections.

    Args:
        message (str): Error message
        status_code (int): HTTP status code, 0 when no response was received
        code (str): Store-specific error code

    Attributes:
        message (str): Error message
        status_code (int): HTTP status code
        code (str): Store-specific error code
    """

    def __init__(self, message: str, status_code: int = 0, code: str = ""):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(self.message)


class ValidationError(RemoteError):
    """The remote store rejected a record as invalid."""

    pass


class RemoteStore(Protocol):
    """Persistent collection of notes reached over the network.

    Every method is a suspension point and may raise RemoteError.
    """

    async def query_all(self, owner: str) -> list[Note]:
        """Return every note of *owner*, most recently updated first."""
        ...

    async def insert(self, note: Note) -> Note:
        """Persist a note without an id and return it with its assigned id."""
        ...

    async def update(self, note_id: str, fields: dict[str, Any]) -> None:
        """Update some fields of an existing note."""
        ...

    async def delete(self, note_id: str) -> None:
        """Delete a note."""
        ...
