"""Configuration management for termnotify."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import yaml

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "TERMNOTIFY_API_KEY"

MIN_CHECK_INTERVAL_MS = 1000
DEFAULT_CHECK_INTERVAL_MS = 5000


@dataclass
class ClassifierConfig:
    """Classifier endpoint configuration.

    An empty endpoint or api_key disables classification entirely.
    """

    endpoint: str = ""
    api_key: str = ""
    provider: str = "openai"  # openai | claude | custom
    model_name: str = ""  # Overrides the provider default model

    @property
    def is_configured(self) -> bool:
        """True when both endpoint and api_key are set."""
        return bool(self.endpoint) and bool(self.api_key)


@dataclass
class MonitorConfig:
    """Monitor loop configuration. Times are in milliseconds."""

    enabled: bool = True
    check_interval_ms: int = DEFAULT_CHECK_INTERVAL_MS
    min_content_length: int = 50
    notification_cooldown_ms: int = 300000
    excerpt_lines: int = 100
    buffer_lines: int = 1000

    def __post_init__(self):
        if self.check_interval_ms < MIN_CHECK_INTERVAL_MS:
            logger.warning(
                "check_interval_ms (%s) is below %dms, using %dms",
                self.check_interval_ms,
                MIN_CHECK_INTERVAL_MS,
                DEFAULT_CHECK_INTERVAL_MS,
            )
            self.check_interval_ms = DEFAULT_CHECK_INTERVAL_MS
        if self.notification_cooldown_ms < 0:
            logger.warning(
                "notification_cooldown_ms (%s) is negative, using 0",
                self.notification_cooldown_ms,
            )
            self.notification_cooldown_ms = 0
        if self.buffer_lines < 1:
            logger.warning(
                "buffer_lines (%s) must be positive, using 1000", self.buffer_lines
            )
            self.buffer_lines = 1000


@dataclass
class Config:
    """termnotify configuration."""

    log_level: str = "INFO"
    log_file: str | None = None
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)


def get_config_path(custom_path: Path | None = None) -> Path:
    """Get the configuration file path.

    Args:
        custom_path: Override path. If None, returns default.

    Returns:
        Path to config file.
    """
    if custom_path is not None:
        return custom_path
    return Path.home() / ".config" / "termnotify" / "config.yaml"


def _default_file_reader(path: Path) -> dict[str, Any] | None:
    """Default file reader that loads YAML from disk."""
    if not path.exists():
        return None
    try:
        content = path.read_text()
        if not content.strip():
            return None
        return yaml.safe_load(content)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return None


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a config section, or an empty one if it is not a mapping."""
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        logger.warning("Config section %r is not a mapping, using defaults", name)
        return {}
    return section


def _text(section: dict[str, Any], key: str, default: str) -> str:
    """Read a string setting; surrounding whitespace is dropped."""
    value = section.get(key, default)
    if value is None:
        return default
    return str(value).strip()


def _integer(section: dict[str, Any], key: str, default: int) -> int:
    """Read an integer setting, falling back to the default if malformed."""
    value = section.get(key, default)
    if not isinstance(value, bool):
        try:
            return int(value)
        except (TypeError, ValueError):
            pass
    logger.warning(
        "Config value %s=%r is not an integer, using %d", key, value, default
    )
    return default


def load_config(
    path: Path | None = None,
    file_reader: Callable[[Path], dict[str, Any] | None] | None = None,
    environ: dict[str, str] | None = None,
) -> Config:
    """Load configuration from file.

    Malformed sections and values fall back to their defaults.

    Args:
        path: Path to config file. If None, uses default path.
        file_reader: Injectable file reader for testing.
        environ: Injectable environment mapping for testing.

    Returns:
        Config object with values from file or defaults.
    """
    config_path = get_config_path(path)
    reader = file_reader or _default_file_reader
    env = os.environ if environ is None else environ

    data = reader(config_path)
    if not isinstance(data, dict):
        data = {}

    classifier_data = _section(data, "classifier")
    classifier_config = ClassifierConfig(
        endpoint=_text(classifier_data, "endpoint", ClassifierConfig.endpoint),
        api_key=_text(classifier_data, "api_key", ClassifierConfig.api_key),
        provider=_text(classifier_data, "provider", ClassifierConfig.provider),
        model_name=_text(classifier_data, "model_name", ClassifierConfig.model_name),
    )
    if not classifier_config.api_key:
        classifier_config.api_key = env.get(API_KEY_ENV_VAR, "").strip()

    monitor_data = _section(data, "monitor")
    enabled = monitor_data.get("enabled", MonitorConfig.enabled)
    if not isinstance(enabled, bool):
        logger.warning("Config value enabled=%r is not a boolean, using true", enabled)
        enabled = MonitorConfig.enabled
    monitor_config = MonitorConfig(
        enabled=enabled,
        check_interval_ms=_integer(
            monitor_data, "check_interval_ms", MonitorConfig.check_interval_ms
        ),
        min_content_length=_integer(
            monitor_data, "min_content_length", MonitorConfig.min_content_length
        ),
        notification_cooldown_ms=_integer(
            monitor_data,
            "notification_cooldown_ms",
            MonitorConfig.notification_cooldown_ms,
        ),
        excerpt_lines=_integer(
            monitor_data, "excerpt_lines", MonitorConfig.excerpt_lines
        ),
        buffer_lines=_integer(monitor_data, "buffer_lines", MonitorConfig.buffer_lines),
    )

    return Config(
        log_level=_text(data, "log_level", Config.log_level),
        log_file=data.get("log_file", Config.log_file),
        classifier=classifier_config,
        monitor=monitor_config,
    )
