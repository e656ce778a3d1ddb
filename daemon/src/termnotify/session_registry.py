"""Registry of per-session monitoring state."""

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class SessionRecord:
    """Monitoring state for one session.

    ``fingerprint`` is None until content has been observed.
    ``last_notification_time`` is epoch millis, 0 meaning never.
    """

    session_id: str
    label: str = ""
    last_content: str = ""
    fingerprint: Optional[int] = None
    last_notification_time: int = 0
    running: bool = False
    notified: bool = False


class SessionIdAllocator:
    """Assigns session IDs as ``<counter>-<creation millis>``.

    The counter is monotonic for the allocator's lifetime, so two sessions
    with identical names or creation times still get distinct IDs.
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._counter = itertools.count(1)
        self._clock = clock or (lambda: int(time.time() * 1000))

    def allocate(self) -> str:
        """Return a fresh, never-reused session ID."""
        return f"{next(self._counter)}-{self._clock()}"


class SessionRegistry:
    """One SessionRecord per live session ID.

    This is a simple state container; buffers are kept in sync by the
    monitor's lifecycle hooks, not here.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._records: dict[str, SessionRecord] = {}

    def open(self, session_id: str, label: str = "") -> SessionRecord:
        """Create a fresh record unless one already exists.

        Args:
            session_id: Session ID.
            label: Display name used in notifications.

        Returns:
            The new record, or the existing one untouched.
        """
        record = self._records.get(session_id)
        if record is None:
            record = SessionRecord(session_id=session_id, label=label)
            self._records[session_id] = record
            logger.debug("Session opened: %s", session_id)
        return record

    def close(self, session_id: str) -> Optional[SessionRecord]:
        """Remove and return a session's record.

        Returns:
            Removed record if found, None otherwise.
        """
        record = self._records.pop(session_id, None)
        if record is not None:
            logger.debug("Session closed: %s", session_id)
        return record

    def get(self, session_id: str) -> Optional[SessionRecord]:
        """Get record by ID, or None if absent."""
        return self._records.get(session_id)

    def list_all(self) -> list[SessionRecord]:
        """Get list of all records."""
        return list(self._records.values())

    def clear_all(self) -> None:
        """Drop every record. Buffers are left alone."""
        self._records.clear()

    def __len__(self) -> int:
        """Return number of records in registry."""
        return len(self._records)

    def __contains__(self, session_id: str) -> bool:
        """Check if a record exists for the session."""
        return session_id in self._records
