"""Terminal output buffering."""

from termnotify.terminal.buffer import ContentBuffer, DEFAULT_MAX_LINES
from termnotify.terminal.capture import OutputRecorder

__all__ = [
    "ContentBuffer",
    "DEFAULT_MAX_LINES",
    "OutputRecorder",
]
