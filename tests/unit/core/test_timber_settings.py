# tests/unit/core/test_timber_settings.py
"""Tests for settings models and load_settings()."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from timber.core.config import (
    CacheSettings,
    LoggingSettings,
    SinkSettings,
    TelemetrySettings,
    TimberSettings,
    load_settings,
)


class TestSettingsModels:
    def test_defaults(self) -> None:
        settings = TimberSettings()

        assert [sink.name for sink in settings.telemetry.sinks] == ["logger"]
        assert settings.telemetry.property_schema.required_properties == ()
        assert settings.logging.json_output is False
        assert settings.logging.level == "INFO"
        assert settings.cache.default_ttl_ms == 30_000

    def test_settings_are_frozen(self) -> None:
        settings = LoggingSettings()
        with pytest.raises(ValidationError):
            settings.level = "DEBUG"  # type: ignore[misc]

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TimberSettings.model_validate({"telemetry": {"exporters": []}})

    def test_blank_sink_name_rejected(self) -> None:
        with pytest.raises(ValidationError, match="sink name must not be empty"):
            SinkSettings(name="  ")

    def test_sink_name_stripped(self) -> None:
        assert SinkSettings(name=" console ").name == "console"

    def test_duplicate_sinks_rejected(self) -> None:
        with pytest.raises(ValidationError, match="duplicate sink names"):
            TelemetrySettings(sinks=(SinkSettings(name="console"), SinkSettings(name="console")))

    def test_level_normalized(self) -> None:
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_invalid_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(level="LOUD")

    def test_negative_ttl_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CacheSettings(default_ttl_ms=-1)


class TestLoadSettings:
    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "missing.yaml")

    def test_loads_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "timber.yaml"
        config_file.write_text(
            """
telemetry:
  sinks:
    - name: console
      options:
        format: pretty
    - name: logger
  property_schema:
    required_properties:
      - tenant_id
logging:
  json_output: true
  level: warning
cache:
  default_ttl_ms: 5000
"""
        )

        settings = load_settings(config_file)

        assert [sink.name for sink in settings.telemetry.sinks] == ["console", "logger"]
        assert settings.telemetry.sinks[0].options == {"format": "pretty"}
        assert settings.telemetry.property_schema.required_properties == ("tenant_id",)
        assert settings.logging.json_output is True
        assert settings.logging.level == "WARNING"
        assert settings.cache.default_ttl_ms == 5000

    def test_invalid_yaml_values_raise(self, tmp_path: Path) -> None:
        config_file = tmp_path / "timber.yaml"
        config_file.write_text("cache:\n  default_ttl_ms: -10\n")

        with pytest.raises(ValidationError):
            load_settings(config_file)
