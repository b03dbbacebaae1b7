# src/timber/telemetry/sinks/logger.py
"""Structured-logging sink.

Forwards each completed telemetry event to a structlog logger at the
event's severity, so telemetry ends up wherever the service's logs go
(see timber.core.logging.configure_logging).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from timber.contracts.enums import LogLevel
from timber.telemetry.sinks.options import LoggerSinkOptions, parse_sink_options

if TYPE_CHECKING:
    from timber.telemetry.event import TelemetryEvent

_LEVEL_METHODS: dict[LogLevel, str] = {
    LogLevel.VERBOSE: "debug",
    LogLevel.INFO: "info",
    LogLevel.WARNING: "warning",
    LogLevel.ERROR: "error",
}


class LoggerSink:
    """Emit telemetry events as structlog records.

    Configuration options (see LoggerSinkOptions):
        logger_name: Name of the target logger (default "timber.telemetry.events")
        include_properties: Nest the property bag under "properties"
            (default True). When False, properties are omitted.
    """

    _name = "logger"

    def __init__(self) -> None:
        self._options = LoggerSinkOptions()

    @property
    def name(self) -> str:
        return self._name

    @property
    def options(self) -> LoggerSinkOptions:
        return self._options

    def configure(self, config: Mapping[str, Any]) -> None:
        """Replace the options with validated values from config.

        Raises:
            TelemetrySinkError: If an option is unknown or has an invalid value
        """
        self._options = parse_sink_options(self._name, LoggerSinkOptions, config)

    def emit(self, event: TelemetryEvent) -> None:
        target = structlog.get_logger(self._options.logger_name)
        level = event.log_level if event.log_level is not None else LogLevel.INFO
        fields: dict[str, Any] = {
            "event_name": event.event_name,
            "event_type": event.type.value,
            "successful": event.successful,
            "latency_ms": event.latency_ms,
            "telemetry_timestamp": event.timestamp.isoformat(),
        }
        if event.status_code is not None:
            fields["status_code"] = event.status_code
        if event.metadata is not None:
            fields["metadata"] = dict(event.metadata)
        if self._options.include_properties:
            fields["properties"] = dict(event.properties)
        if event.exception is not None:
            fields["exc_info"] = event.exception

        getattr(target, _LEVEL_METHODS[level])(event.message, **fields)
