"""Durable local key/value storage backed by SQLite."""

import logging
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from focuspad.database.schema import KeyValueRecord, init_database

logger = logging.getLogger(__name__)


class LocalPersistenceError(Exception):
    """Local storage is unavailable or holds malformed data.

    Never propagated past the component that owns the key: callers degrade to
    an empty or default value instead.
    """

    pass


class LocalKeyValueStore(Protocol):
    """Synchronous store for small serialized blobs that survives restarts."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when absent or unreadable."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*; failures are absorbed."""
        ...


class KeyValueRepository:
    """Key/value store on a single SQLite table.

    Storage errors are logged and degrade to "absent"; nothing raises to the
    caller.
    """

    def __init__(self, database_url: str):
        """Initialize repository with database connection."""
        self.session_factory = None
        try:
            self.session_factory = init_database(database_url)
        except SQLAlchemyError as e:
            logger.warning("Local storage unavailable at %s: %s", database_url, e)

    def _get_session(self) -> Session:
        """Get a new database session."""
        if self.session_factory is None:
            raise LocalPersistenceError("Local storage is not initialized")
        return self.session_factory()

    def get(self, key: str) -> Optional[str]:
        """Get the value stored under *key*."""
        try:
            with self._get_session() as session:
                record = session.get(KeyValueRecord, key)
                return record.value if record else None
        except (SQLAlchemyError, LocalPersistenceError) as e:
            logger.warning("Could not read local key %r: %s", key, e)
            return None

    def set(self, key: str, value: str) -> None:
        """Insert or replace the value stored under *key*."""
        try:
            with self._get_session() as session:
                record = session.get(KeyValueRecord, key)
                if record:
                    record.value = value
                else:
                    session.add(KeyValueRecord(key=key, value=value))
                session.commit()
        except (SQLAlchemyError, LocalPersistenceError) as e:
            logger.warning("Could not write local key %r: %s", key, e)

