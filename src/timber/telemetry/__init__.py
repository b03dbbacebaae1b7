# src/timber/telemetry/__init__.py
"""Telemetry capture and emission.

Components:
- event: TelemetryEvent, completed exactly once with success()/error()
- manager: TelemetryManager, write-once sink/validator configuration
- protocols: SinkProtocol, SchemaValidatorProtocol, ValidationResult
- validation: RequiredPropertiesValidator
- hookspecs: pluggy hooks for sink discovery
- factory: create_telemetry_manager() from TelemetrySettings
- sinks: Built-in sinks (ConsoleSink, LoggerSink)
- errors: Usage and configuration errors

The module-level setup(), new_metric() and log() functions operate on the
shared process-wide manager (TelemetryManager.instance()):

    from timber import telemetry
    from timber.contracts import LogLevel

    telemetry.setup([ConsoleSink()], RequiredPropertiesValidator())
    metric = telemetry.new_metric("DocumentLoad", {"tenant_id": "t1"})
    metric.success("Loaded", status_code=200)
    telemetry.log("Cache miss", LogLevel.INFO)
"""

from collections.abc import Sequence

from timber.contracts.enums import LogLevel
from timber.telemetry.errors import (
    EmptySinkListError,
    EventAlreadyCompletedError,
    TelemetryAlreadySetupError,
    TelemetryError,
    TelemetryNotSetupError,
    TelemetrySinkError,
)
from timber.telemetry.event import PropertiesInput, PropertyValue, TelemetryEvent
from timber.telemetry.factory import create_telemetry_manager
from timber.telemetry.manager import TelemetryManager, caller_event_name
from timber.telemetry.protocols import SchemaValidatorProtocol, SinkProtocol, ValidationResult
from timber.telemetry.sinks import ConsoleSink, LoggerSink
from timber.telemetry.validation import RequiredPropertiesValidator


def setup(sinks: Sequence[SinkProtocol], schema_validator: SchemaValidatorProtocol | None) -> None:
    """Set up the shared manager. See TelemetryManager.setup()."""
    TelemetryManager.instance().setup(sinks, schema_validator)


def new_metric(event_name: str, properties: PropertiesInput | None = None) -> TelemetryEvent:
    """Create a metric on the shared manager. See TelemetryManager.new_metric()."""
    return TelemetryManager.instance().new_metric(event_name, properties)


def log(
    message: str,
    level: LogLevel,
    properties: PropertiesInput | None = None,
    status_code: int | str | None = None,
    exception: BaseException | None = None,
    *,
    event_name: str | None = None,
) -> TelemetryEvent:
    """Log through the shared manager. See TelemetryManager.log()."""
    manager = TelemetryManager.instance()
    if event_name is None and manager.is_setup_complete:
        event_name = caller_event_name(1)
    return manager.log(message, level, properties, status_code, exception, event_name=event_name)


__all__ = [
    "ConsoleSink",
    "EmptySinkListError",
    "EventAlreadyCompletedError",
    "LoggerSink",
    "PropertiesInput",
    "PropertyValue",
    "RequiredPropertiesValidator",
    "SchemaValidatorProtocol",
    "SinkProtocol",
    "TelemetryAlreadySetupError",
    "TelemetryError",
    "TelemetryEvent",
    "TelemetryManager",
    "TelemetryNotSetupError",
    "TelemetrySinkError",
    "ValidationResult",
    "create_telemetry_manager",
    "log",
    "new_metric",
    "setup",
]
