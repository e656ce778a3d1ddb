"""Protocols for the host environment termnotify runs inside."""

from typing import Optional, Protocol


class TerminalSession(Protocol):
    """A host terminal session handle.

    The monitor keys handles by object identity; ``name`` is only used as
    a display label.
    """

    name: str

    async def show(self) -> None:
        """Bring the session to the front."""
        ...


class HostWindow(Protocol):
    """User-facing message surface of the host."""

    async def show_info(self, message: str) -> None:
        """Show an informational message."""
        ...

    async def show_warning(self, message: str, *actions: str) -> Optional[str]:
        """Show a warning; returns the chosen action, if any."""
        ...

    async def show_error(self, message: str, *actions: str) -> Optional[str]:
        """Show an error; returns the chosen action, if any."""
        ...


class SessionHost(Protocol):
    """Enumerates sessions that are currently live in the host."""

    def live_sessions(self) -> list[TerminalSession]:
        """Return all live session handles."""
        ...
