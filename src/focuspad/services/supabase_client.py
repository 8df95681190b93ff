"""Supabase client for the remote note store.

Talks to the PostgREST endpoint of a Supabase project directly via the
requests library. Blocking HTTP calls run in a worker thread so the event
loop keeps serving keystrokes while a request is in flight.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from focuspad.models.note import DEFAULT_TITLE, Note, utcnow
from focuspad.services.remote_store import RemoteError, ValidationError

logger = logging.getLogger(__name__)

# Postgres error classes for data exceptions and integrity violations
_VALIDATION_CODE_PREFIXES = ("22", "23")
_VALIDATION_STATUS_CODES = (409, 422)


class SupabaseConnectionError(RemoteError):
    """The Supabase endpoint could not be reached or timed out."""

    pass


class SupabaseStore:
    """Remote store backed by the ``notes`` table of a Supabase project.

    Args:
        url (str): Supabase project URL
        api_key (str): Project API key (anon key)
        access_token (str, optional): Access token of the signed-in user
        timeout (float): Per-request timeout in seconds

    Attributes:
        base_url (str): PostgREST base URL
        table (str): Table holding the notes
        timeout (float): Per-request timeout in seconds
    """

    TABLE = "notes"

    def __init__(
        self,
        url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
    ):
        """Initialize Supabase client.

        Args:
            url: Supabase project URL
            api_key: Project API key
            access_token: Access token of the signed-in user (defaults to api_key)
            timeout: Per-request timeout in seconds
        """
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.table = self.TABLE
        self.timeout = timeout
        self._api_key = api_key
        self._access_token = access_token or api_key

    def _get_headers(self) -> dict[str, str]:
        """Get standard headers for PostgREST requests.

        Returns:
            dict[str, str]: Headers dict with apikey, Authorization and Prefer
        """
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    def _handle_response(self, response: requests.Response) -> Any:
        """Handle API response and raise RemoteError on failure.

        Args:
            response (requests.Response): Response from requests library

        Returns:
            Any: Parsed JSON response, or None for an empty body

        Raises:
            ValidationError: If the store rejected the record
            RemoteError: If the API returns any other error status
        """
        if response.status_code >= 400:
            try:
                error_data = response.json()
                message = error_data.get("message", "Unknown error")
                code = str(error_data.get("code") or "")
            except (ValueError, AttributeError):
                message = response.text or "Unknown error"
                code = ""

            if response.status_code in _VALIDATION_STATUS_CODES or code.startswith(
                _VALIDATION_CODE_PREFIXES
            ):
                raise ValidationError(message, status_code=response.status_code, code=code)
            raise RemoteError(message, status_code=response.status_code, code=code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _request(
        self,
        method: str,
        params: Optional[dict[str, str]] = None,
        payload: Optional[Any] = None,
    ) -> Any:
        """Make a request against the notes table.

        Args:
            method (str): HTTP method
            params (dict[str, str], optional): PostgREST query parameters
            payload (Any, optional): JSON payload to send

        Returns:
            Any: Parsed JSON response

        Raises:
            SupabaseConnectionError: If the endpoint is unreachable or times out
            RemoteError: If the request fails for any other reason
        """
        try:
            response = requests.request(
                method,
                f"{self.base_url}/{self.table}",
                headers=self._get_headers(),
                params=params,
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            raise SupabaseConnectionError("Cannot connect to Supabase") from e
        except requests.exceptions.Timeout as e:
            raise SupabaseConnectionError("Supabase request timed out") from e
        except requests.exceptions.RequestException as e:
            raise RemoteError(f"Supabase request failed: {e}") from e

        return self._handle_response(response)

    # ==================== Blocking operations ====================

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(SupabaseConnectionError),
        reraise=True,
    )
    def fetch_rows(self, owner: str) -> list[dict[str, Any]]:
        """Fetch every row of *owner*, newest first.

        Transport failures are retried; the query is a plain read.
        """
        rows = self._request(
            "GET",
            params={
                "select": "*",
                "user_id": f"eq.{owner}",
                "order": "updated_at.desc",
            },
        )
        return rows or []

    def insert_row(self, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a single row and return it as stored."""
        rows = self._request("POST", payload=[row])
        if not rows:
            raise RemoteError("Insert returned no row")
        return rows[0]

    def update_row(self, note_id: str, row: dict[str, Any]) -> None:
        """Patch the row with id *note_id*."""
        rows = self._request("PATCH", params={"id": f"eq.{note_id}"}, payload=row)
        if not rows:
            raise RemoteError(f"Note {note_id} not found", status_code=404, code="not_found")

    def delete_row(self, note_id: str) -> None:
        """Delete the row with id *note_id*."""
        rows = self._request("DELETE", params={"id": f"eq.{note_id}"})
        if not rows:
            raise RemoteError(f"Note {note_id} not found", status_code=404, code="not_found")

    # ==================== RemoteStore ====================

    async def query_all(self, owner: str) -> list[Note]:
        rows = await asyncio.to_thread(self.fetch_rows, owner)
        logger.debug("Fetched %d notes for %s", len(rows), owner)
        return [self._row_to_note(row) for row in rows]

    async def insert(self, note: Note) -> Note:
        row = await asyncio.to_thread(self.insert_row, self._note_to_row(note))
        return self._row_to_note(row)

    async def update(self, note_id: str, fields: dict[str, Any]) -> None:
        await asyncio.to_thread(self.update_row, note_id, self._fields_to_row(fields))

    async def delete(self, note_id: str) -> None:
        await asyncio.to_thread(self.delete_row, note_id)

    # ==================== Helper Methods ====================

    @staticmethod
    def _parse_timestamp(value: Optional[str]) -> datetime:
        """Parse a PostgREST timestamp, assuming UTC when no offset is given."""
        if not value:
            return utcnow()
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @classmethod
    def _row_to_note(cls, row: dict[str, Any]) -> Note:
        """Convert a table row to a Note model."""
        return Note(
            id=str(row["id"]),
            owner=row.get("user_id") or "",
            title=row.get("title") or DEFAULT_TITLE,
            content=row.get("content") or "",
            is_pinned=bool(row.get("is_pinned")),
            is_public=bool(row.get("is_public")),
            created_at=cls._parse_timestamp(row.get("created_at")),
            updated_at=cls._parse_timestamp(row.get("updated_at")),
        )

    @staticmethod
    def _note_to_row(note: Note) -> dict[str, Any]:
        """Convert a new Note to an insertable row (the store assigns id and timestamps)."""
        return {
            "user_id": note.owner,
            "title": note.title or DEFAULT_TITLE,
            "content": note.content,
            "is_pinned": note.is_pinned,
            "is_public": note.is_public,
        }

    @staticmethod
    def _fields_to_row(fields: dict[str, Any]) -> dict[str, Any]:
        """Convert partial Note fields to column values."""
        row: dict[str, Any] = {}
        for name, value in fields.items():
            column = "user_id" if name == "owner" else name
            row[column] = value.isoformat() if isinstance(value, datetime) else value
        return row
