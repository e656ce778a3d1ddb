"""termnotify - AI-gated notifications for terminal sessions."""

__version__ = "0.1.0"
