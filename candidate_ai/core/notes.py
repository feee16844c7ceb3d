"""Private recruiter notes: write-through cache over the key/value table.

The in-memory mapping is the source of truth. Every change is written back
best-effort; storage failures are logged and never raised.
"""

import json
import logging
import sqlite3
from types import TracebackType

from candidate_ai.core.db import delete_value, get_value, set_value

logger = logging.getLogger(__name__)

NOTES_NAMESPACE = "candidate_ai_notes"


class NoteStore:
    """Scoped access to the notes mapping.

    Usage::

        with NoteStore(conn) as notes:
            notes.set("c-1", "Strong references")
            notes.get("c-1")
    """

    def __init__(self, conn: sqlite3.Connection, namespace: str = NOTES_NAMESPACE) -> None:
        self._conn = conn
        self._namespace = namespace
        self._notes: dict[str, str] | None = None

    def __enter__(self) -> "NoteStore":
        self._notes = self._read()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._notes = None

    @property
    def _mapping(self) -> dict[str, str]:
        if self._notes is None:
            msg = "NoteStore not entered - use 'with'"
            raise RuntimeError(msg)
        return self._notes

    def get(self, candidate_id: str) -> str:
        """Return the note for a candidate, or an empty string."""
        return self._mapping.get(candidate_id, "")

    def set(self, candidate_id: str, text: str) -> None:
        """Replace a candidate's note and write the mapping through."""
        self._mapping[candidate_id] = text
        self._write()

    def all(self) -> dict[str, str]:
        """Return a copy of every stored note."""
        return dict(self._mapping)

    def clear(self) -> None:
        """Drop every note, in memory and in storage."""
        self._mapping.clear()
        try:
            delete_value(self._conn, self._namespace)
        except sqlite3.Error:
            logger.warning("Failed to clear notes in '%s'", self._namespace, exc_info=True)

    def _read(self) -> dict[str, str]:
        raw = get_value(self._conn, self._namespace)
        if raw is None:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored notes in '%s' are not valid JSON - starting empty", self._namespace)
            return {}
        if not isinstance(data, dict):
            logger.warning("Stored notes in '%s' are not a mapping - starting empty", self._namespace)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self) -> None:
        try:
            set_value(self._conn, self._namespace, json.dumps(self._mapping))
        except sqlite3.Error:
            logger.warning("Failed to persist notes to '%s'", self._namespace, exc_info=True)
