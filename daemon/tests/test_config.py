"""Tests for config module."""

import logging
from pathlib import Path
from unittest.mock import Mock

import pytest
import yaml

from termnotify.config import (
    API_KEY_ENV_VAR,
    ClassifierConfig,
    Config,
    MonitorConfig,
    get_config_path,
    load_config,
)


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_config_values(self):
        """Config has sensible defaults when no file exists."""
        config = Config()

        assert config.log_level == "INFO"
        assert config.log_file is None

    def test_classifier_defaults(self):
        """Classifier is unconfigured by default."""
        config = ClassifierConfig()

        assert config.endpoint == ""
        assert config.api_key == ""
        assert config.provider == "openai"
        assert config.model_name == ""
        assert config.is_configured is False

    def test_monitor_defaults(self):
        """Monitor defaults match the documented table."""
        config = MonitorConfig()

        assert config.enabled is True
        assert config.check_interval_ms == 5000
        assert config.min_content_length == 50
        assert config.notification_cooldown_ms == 300000
        assert config.excerpt_lines == 100
        assert config.buffer_lines == 1000

    def test_is_configured_requires_both_fields(self):
        """Both endpoint and api_key are needed."""
        assert not ClassifierConfig(endpoint="https://x").is_configured
        assert not ClassifierConfig(api_key="k").is_configured
        assert ClassifierConfig(endpoint="https://x", api_key="k").is_configured


class TestMonitorConfigClamping:
    """Test interval and cooldown sanitising."""

    def test_interval_below_floor_is_reset(self, caplog):
        """Intervals under 1000ms fall back to 5000ms with a warning."""
        with caplog.at_level(logging.WARNING):
            config = MonitorConfig(check_interval_ms=200)

        assert config.check_interval_ms == 5000
        assert "check_interval_ms" in caplog.text

    def test_interval_at_floor_is_kept(self):
        """Exactly 1000ms is allowed."""
        config = MonitorConfig(check_interval_ms=1000)
        assert config.check_interval_ms == 1000

    def test_negative_cooldown_clamped_to_zero(self, caplog):
        """Negative cooldowns are treated as no cooldown."""
        with caplog.at_level(logging.WARNING):
            config = MonitorConfig(notification_cooldown_ms=-5)

        assert config.notification_cooldown_ms == 0
        assert "notification_cooldown_ms" in caplog.text


class TestGetConfigPath:
    """Test config path resolution."""

    def test_get_config_path_default(self):
        """Default config path is ~/.config/termnotify/config.yaml."""
        path = get_config_path()
        assert path == Path.home() / ".config" / "termnotify" / "config.yaml"

    def test_get_config_path_custom(self):
        """Can override config path."""
        custom = Path("/custom/config.yaml")
        assert get_config_path(custom) == custom


class TestLoadConfig:
    """Test config loading."""

    def test_load_config_no_file_returns_defaults(self, tmp_path):
        """Config returns defaults when no file exists."""
        config = load_config(tmp_path / "nonexistent.yaml", environ={})

        assert config.log_level == "INFO"
        assert config.classifier.is_configured is False
        assert config.monitor.check_interval_ms == 5000

    def test_load_config_from_file(self, tmp_path):
        """Config loads values from YAML file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.dump(
                {
                    "log_level": "DEBUG",
                    "classifier": {
                        "endpoint": "https://api.anthropic.com/v1/messages",
                        "api_key": "sk-test",
                        "provider": "claude",
                        "model_name": "claude-3-5-haiku-latest",
                    },
                    "monitor": {
                        "enabled": False,
                        "check_interval_ms": 2000,
                        "min_content_length": 10,
                        "notification_cooldown_ms": 60000,
                    },
                }
            )
        )

        config = load_config(config_file, environ={})

        assert config.log_level == "DEBUG"
        assert config.classifier.endpoint == "https://api.anthropic.com/v1/messages"
        assert config.classifier.api_key == "sk-test"
        assert config.classifier.provider == "claude"
        assert config.classifier.model_name == "claude-3-5-haiku-latest"
        assert config.monitor.enabled is False
        assert config.monitor.check_interval_ms == 2000
        assert config.monitor.min_content_length == 10
        assert config.monitor.notification_cooldown_ms == 60000

    def test_config_file_overrides_defaults(self, tmp_path):
        """File values override defaults, missing values use defaults."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"monitor": {"min_content_length": 5}}))

        config = load_config(config_file, environ={})

        assert config.monitor.min_content_length == 5
        assert config.monitor.check_interval_ms == 5000
        assert config.classifier.provider == "openai"

    def test_file_interval_below_floor_is_clamped(self, tmp_path):
        """Clamping also applies to values read from file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"monitor": {"check_interval_ms": 10}}))

        config = load_config(config_file, environ={})

        assert config.monitor.check_interval_ms == 5000

    def test_api_key_from_environment(self, tmp_path):
        """Environment supplies api_key when the file leaves it empty."""
        config = load_config(
            tmp_path / "missing.yaml",
            environ={API_KEY_ENV_VAR: "env-key"},
        )

        assert config.classifier.api_key == "env-key"

    def test_file_api_key_wins_over_environment(self, tmp_path):
        """An explicit api_key in the file is kept."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"classifier": {"api_key": "file-key"}}))

        config = load_config(config_file, environ={API_KEY_ENV_VAR: "env-key"})

        assert config.classifier.api_key == "file-key"

    def test_unknown_provider_is_kept_for_call_time_error(self, tmp_path):
        """Provider names are not validated at load time."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"classifier": {"provider": "gemini"}}))

        config = load_config(config_file, environ={})

        assert config.classifier.provider == "gemini"

    def test_load_config_with_injectable_reader(self, tmp_path):
        """Config loading supports injectable file reader for testing."""
        mock_reader = Mock(return_value={"log_level": "WARNING"})

        config = load_config(
            tmp_path / "config.yaml", file_reader=mock_reader, environ={}
        )

        assert config.log_level == "WARNING"
        mock_reader.assert_called_once()

    def test_load_config_handles_invalid_yaml(self, tmp_path):
        """Config handles invalid YAML gracefully."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("invalid: yaml: content: [")

        config = load_config(config_file, environ={})

        assert config.monitor.check_interval_ms == 5000

    def test_load_config_handles_empty_file(self, tmp_path):
        """Config handles empty file gracefully."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        config = load_config(config_file, environ={})

        assert config.log_level == "INFO"

    def test_load_config_handles_non_mapping(self, tmp_path):
        """A YAML list at top level is ignored."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump(["a", "b"]))

        config = load_config(config_file, environ={})

        assert config.log_level == "INFO"

    @pytest.mark.parametrize("section", ["classifier", "monitor"])
    def test_null_sections_use_defaults(self, tmp_path, section):
        """An empty section key does not break loading."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(f"{section}:\n")

        config = load_config(config_file, environ={})

        assert config.classifier.provider == "openai"
        assert config.monitor.min_content_length == 50

    def test_credentials_are_stripped(self, tmp_path):
        """Trailing newlines from block scalars never reach HTTP headers."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "classifier:\n"
            "  endpoint: |\n"
            "    https://judge.example/v1\n"
            "  api_key: |\n"
            "    sk-abc\n"
        )

        config = load_config(config_file, environ={})

        assert config.classifier.endpoint == "https://judge.example/v1"
        assert config.classifier.api_key == "sk-abc"

    def test_environment_api_key_is_stripped(self, tmp_path):
        config = load_config(
            tmp_path / "missing.yaml", environ={API_KEY_ENV_VAR: "env-key\n"}
        )

        assert config.classifier.api_key == "env-key"

    @pytest.mark.parametrize("section", ["classifier", "monitor"])
    @pytest.mark.parametrize("value", ["just a string", ["a", "b"], 42])
    def test_non_mapping_section_uses_defaults(self, tmp_path, section, value, caplog):
        """A section that is not a mapping is ignored with a warning."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({section: value}))

        with caplog.at_level(logging.WARNING):
            config = load_config(config_file, environ={})

        assert config.classifier == ClassifierConfig()
        assert config.monitor == MonitorConfig()
        assert section in caplog.text

    def test_numeric_strings_are_accepted(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"monitor": {"check_interval_ms": "2000"}}))

        config = load_config(config_file, environ={})

        assert config.monitor.check_interval_ms == 2000

    @pytest.mark.parametrize(
        "key", ["check_interval_ms", "min_content_length", "notification_cooldown_ms"]
    )
    @pytest.mark.parametrize("value", ["soon", None, [1], True])
    def test_malformed_integers_use_defaults(self, tmp_path, key, value, caplog):
        """Non-numeric values fall back to the default."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"monitor": {key: value}}))

        with caplog.at_level(logging.WARNING):
            config = load_config(config_file, environ={})

        assert getattr(config.monitor, key) == getattr(MonitorConfig(), key)
        assert key in caplog.text

    def test_non_boolean_enabled_uses_default(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.dump({"monitor": {"enabled": "sometimes"}}))

        config = load_config(config_file, environ={})

        assert config.monitor.enabled is True

    def test_non_positive_buffer_lines_reset(self):
        assert MonitorConfig(buffer_lines=0).buffer_lines == 1000
