"""Logging configuration for termnotify.

Every module logs to a child of the ``termnotify`` logger, which is set up
once per process. Log output goes to stderr (and optionally a file) so
stdout stays free for command results such as a classify verdict.
Configured credentials are masked in every record before it is written.
"""

import logging
import sys
from pathlib import Path
from typing import Iterable

from termnotify.config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Module-level logger cache
_logger: logging.Logger | None = None


def mask_secret(secret: str) -> str:
    """Shorten a credential to a recognizable but unusable form."""
    if not secret:
        return ""
    if len(secret) <= 8:
        return "****"
    return secret[:4] + "****"


class SecretRedactingFilter(logging.Filter):
    """Replaces known credentials in log messages with their masked form."""

    def __init__(self, secrets: Iterable[str]):
        super().__init__()
        self._secrets = [s for s in secrets if s]

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        redacted = message
        for secret in self._secrets:
            redacted = redacted.replace(secret, mask_secret(secret))
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(config: Config, verbose: bool = False) -> logging.Logger:
    """Set up the ``termnotify`` logger.

    Args:
        config: Configuration with log level, log file and the classifier
            credential to redact.
        verbose: Log at DEBUG regardless of the configured level.

    Returns:
        The configured ``termnotify`` logger. Later calls return it as is.
    """
    global _logger

    if _logger is not None:
        return _logger

    logger = logging.getLogger("termnotify")
    if verbose:
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    redactor = SecretRedactingFilter([config.classifier.api_key])

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(redactor)
        logger.addHandler(handler)

    logger.propagate = False

    _logger = logger
    return logger


def reset_logging() -> None:
    """Reset logging state. Used for testing."""
    global _logger
    if _logger is not None:
        for handler in _logger.handlers:
            handler.close()
        _logger.handlers.clear()
        _logger.setLevel(logging.NOTSET)
        _logger.propagate = True
        _logger = None
