"""Session monitor: change detection, rate limiting and notification."""

from .events import (
    CommandFinished,
    CommandStarted,
    HostEvent,
    OutputReceived,
    SessionClosed,
    SessionOpened,
)
from .fingerprint import fingerprint
from .loop import DISMISS_ACTION, SHOW_TERMINAL_ACTION, TerminalMonitor

__all__ = [
    "CommandFinished",
    "CommandStarted",
    "HostEvent",
    "OutputReceived",
    "SessionClosed",
    "SessionOpened",
    "fingerprint",
    "DISMISS_ACTION",
    "SHOW_TERMINAL_ACTION",
    "TerminalMonitor",
]
