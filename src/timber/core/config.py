# src/timber/core/config.py
"""Configuration schema and loading for timber.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are immutable after construction.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class SinkSettings(BaseModel):
    """A telemetry sink to instantiate.

    Example YAML:
        sinks:
          - name: console
            options:
              format: pretty
    """

    model_config = {"frozen": True, "extra": "forbid"}

    name: str = Field(description="Sink name as registered via timber_get_sinks")
    options: dict[str, Any] = Field(default_factory=dict, description="Sink-specific options")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("sink name must not be empty")
        return v


class SchemaSettings(BaseModel):
    """Property schema enforced on every emitted event."""

    model_config = {"frozen": True, "extra": "forbid"}

    required_properties: tuple[str, ...] = Field(
        default=(),
        description="Properties that must be present (and not null) on every event",
    )


class TelemetrySettings(BaseModel):
    """Telemetry sinks and schema."""

    model_config = {"frozen": True, "extra": "forbid"}

    sinks: tuple[SinkSettings, ...] = Field(
        default=(SinkSettings(name="logger"),),
        description="Sinks receiving completed events, in emission order",
    )
    property_schema: SchemaSettings = Field(default_factory=SchemaSettings)

    @field_validator("sinks")
    @classmethod
    def validate_unique_sinks(cls, v: tuple[SinkSettings, ...]) -> tuple[SinkSettings, ...]:
        names = [sink.name for sink in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate sink names: {duplicates}")
        return v


class LoggingSettings(BaseModel):
    """Structured logging output."""

    model_config = {"frozen": True, "extra": "forbid"}

    json_output: bool = Field(default=False, description="Render JSON lines instead of console output")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class CacheSettings(BaseModel):
    """Defaults for ExpiringCache users."""

    model_config = {"frozen": True, "extra": "forbid"}

    default_ttl_ms: int = Field(default=30_000, ge=0, description="TTL used when callers do not pass one")


class TimberSettings(BaseModel):
    """Top-level settings."""

    model_config = {"frozen": True, "extra": "forbid"}

    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)


def load_settings(config_path: Path) -> TimberSettings:
    """Load settings from YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (TIMBER_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Environment variable format: TIMBER_LOGGING__LEVEL for nested keys.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="TIMBER",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys at the top level; Pydantic wants lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    return TimberSettings.model_validate(raw_config)
