"""Per-session line buffers for terminal output."""

from collections import deque
from threading import Lock

DEFAULT_MAX_LINES = 1000


class ContentBuffer:
    """Bounded line buffers keyed by session ID.

    Each session keeps its most recent ``max_lines`` lines; older lines are
    evicted first. Missing sessions read as empty. The buffer map is
    guarded by a lock, but a single session's buffer expects one writer.
    """

    def __init__(self, max_lines: int = DEFAULT_MAX_LINES):
        """Initialize the buffer.

        Args:
            max_lines: Maximum lines retained per session (default 1000).
        """
        if max_lines < 1:
            raise ValueError("max_lines must be positive")
        self._max_lines = max_lines
        self._buffers: dict[str, deque[str]] = {}
        self._lock = Lock()

    @property
    def max_lines(self) -> int:
        """Line cap per session."""
        return self._max_lines

    def open(self, session_id: str) -> None:
        """Create an empty buffer for a session if none exists."""
        with self._lock:
            self._buffers.setdefault(session_id, deque(maxlen=self._max_lines))

    def append(self, session_id: str, text: str, continue_line: bool = False) -> int:
        """Split text into lines and append them to a session's buffer.

        Args:
            session_id: Target session.
            text: Raw text, possibly spanning several lines.
            continue_line: Join the first line onto the last stored line
                (the previous write ended mid-line).

        Returns:
            Number of new lines added (a continued line is not counted).
        """
        lines = text.splitlines()
        if not lines:
            return 0

        with self._lock:
            buf = self._buffers.get(session_id)
            if buf is None:
                buf = deque(maxlen=self._max_lines)
                self._buffers[session_id] = buf

        if continue_line and buf:
            buf[-1] += lines[0]
            lines = lines[1:]

        # deque(maxlen) drops from the left once full
        buf.extend(lines)
        return len(lines)

    def read(self, session_id: str, last_k: int = 100) -> str:
        """Return the last ``last_k`` lines joined with newlines.

        Args:
            session_id: Session to read.
            last_k: Number of trailing lines to return.

        Returns:
            The excerpt, or an empty string if the session has no buffer.
        """
        with self._lock:
            buf = self._buffers.get(session_id)
            if not buf or last_k <= 0:
                return ""
            lines = list(buf)

        return "\n".join(lines[-last_k:])

    def line_count(self, session_id: str) -> int:
        """Number of lines currently held for a session."""
        with self._lock:
            buf = self._buffers.get(session_id)
            return len(buf) if buf is not None else 0

    def clear(self, session_id: str) -> None:
        """Remove a session's buffer entirely."""
        with self._lock:
            self._buffers.pop(session_id, None)

    def clear_all(self) -> None:
        """Remove every buffer."""
        with self._lock:
            self._buffers.clear()

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._buffers

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffers)
