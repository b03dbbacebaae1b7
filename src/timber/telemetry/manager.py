# src/timber/telemetry/manager.py
"""TelemetryManager coordinates telemetry producers within a process.

The TelemetryManager is the single configuration point for telemetry:
1. Receives the sink list and schema validator exactly once (setup)
2. Creates metric events bound to that configuration (new_metric)
3. Collapses one-shot log lines into the same completion protocol (log)
4. Forwards flush/close to sinks with per-sink failure isolation

Lifecycle:
    Uninitialized --setup()--> Configured (one-way, terminal)

Service code normally uses the shared instance through the module-level
functions in timber.telemetry. Tests and embedded tools should prefer
TelemetryManager.create(), which returns an independent configured
instance, or pass a manager explicitly to the code under test.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import ClassVar

import structlog

from timber.clock import DEFAULT_CLOCK, Clock
from timber.contracts.enums import EventKind, LogLevel
from timber.telemetry.errors import (
    EmptySinkListError,
    TelemetryAlreadySetupError,
    TelemetryNotSetupError,
)
from timber.telemetry.event import PropertiesInput, TelemetryEvent
from timber.telemetry.protocols import SchemaValidatorProtocol, SinkProtocol

logger = structlog.get_logger(__name__)

LOG_EVENT_PREFIX = "LogMessage"

_FAILURE_LEVELS = frozenset({LogLevel.WARNING, LogLevel.ERROR})


def caller_event_name(depth: int) -> str:
    """Build a log event name from the calling frame.

    Format: LogMessage:<file basename>:<function name>. Never raises; falls
    back to the bare prefix when the frame cannot be inspected.

    Args:
        depth: Number of frames above this function's caller to inspect
    """
    try:
        frame = sys._getframe(depth + 1)
        code = frame.f_code
        file_name = os.path.basename(code.co_filename) or "FilenameNotAvailable"
        function_name = code.co_name or "FunctionNameNotAvailable"
        return f"{LOG_EVENT_PREFIX}:{file_name}:{function_name}"
    except Exception:
        return LOG_EVENT_PREFIX


class TelemetryManager:
    """Write-once telemetry configuration plus event factories.

    Example:
        >>> from timber.telemetry import TelemetryManager
        >>> manager = TelemetryManager.create([console_sink], validator)
        >>> metric = manager.new_metric("DocumentLoad")
        >>> metric.success("Loaded")
        >>> manager.log("Cache miss", LogLevel.INFO, {"key": "abc"})
    """

    _instance: ClassVar[TelemetryManager | None] = None

    def __init__(self, *, clock: Clock = DEFAULT_CLOCK) -> None:
        """Create an unconfigured manager.

        Args:
            clock: Clock passed to every event this manager creates
        """
        self._sinks: tuple[SinkProtocol, ...] = ()
        self._schema_validator: SchemaValidatorProtocol | None = None
        self._is_setup_complete = False
        self._clock = clock

    @classmethod
    def instance(cls) -> TelemetryManager:
        """Return the shared process-wide manager, creating it on first access."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def create(
        cls,
        sinks: Sequence[SinkProtocol],
        schema_validator: SchemaValidatorProtocol | None,
        *,
        clock: Clock = DEFAULT_CLOCK,
    ) -> TelemetryManager:
        """Build an independent manager and set it up immediately."""
        manager = cls(clock=clock)
        manager.setup(sinks, schema_validator)
        return manager

    @property
    def sinks(self) -> tuple[SinkProtocol, ...]:
        return self._sinks

    @property
    def schema_validator(self) -> SchemaValidatorProtocol | None:
        return self._schema_validator

    @property
    def is_setup_complete(self) -> bool:
        return self._is_setup_complete

    def setup(
        self,
        sinks: Sequence[SinkProtocol],
        schema_validator: SchemaValidatorProtocol | None,
    ) -> None:
        """Configure the sink list and schema validator exactly once.

        Raises:
            TelemetryAlreadySetupError: If this manager was already set up
            EmptySinkListError: If sinks is empty
        """
        if self._is_setup_complete:
            raise TelemetryAlreadySetupError()
        if len(sinks) == 0:
            raise EmptySinkListError()

        self._sinks = tuple(sinks)
        self._schema_validator = schema_validator
        self._is_setup_complete = True
        logger.debug(
            "Telemetry manager configured",
            sinks=[getattr(sink, "name", type(sink).__name__) for sink in self._sinks],
            schema_validator=type(schema_validator).__name__ if schema_validator is not None else None,
        )

    def new_metric(
        self,
        event_name: str,
        properties: PropertiesInput | None = None,
    ) -> TelemetryEvent:
        """Create a metric event bound to the configured sinks.

        Raises:
            TelemetryNotSetupError: If setup() has not completed
        """
        self._require_setup()
        return TelemetryEvent(
            event_name,
            EventKind.METRIC,
            self._sinks,
            self._schema_validator,
            properties,
            clock=self._clock,
        )

    def log(
        self,
        message: str,
        level: LogLevel,
        properties: PropertiesInput | None = None,
        status_code: int | str | None = None,
        exception: BaseException | None = None,
        *,
        event_name: str | None = None,
    ) -> TelemetryEvent:
        """Create a log event and complete it immediately.

        Warning and Error levels complete through error(); every other level
        completes through success().

        Args:
            message: Human-readable log message
            level: Severity of the record
            properties: Initial property bag
            status_code: Optional status code, normalized to a string
            exception: Optional exception attached to the record
            event_name: Explicit event name. When omitted the name is inferred
                from the calling function as LogMessage:<file>:<function>.

        Returns:
            The completed log event

        Raises:
            TelemetryNotSetupError: If setup() has not completed
        """
        self._require_setup()
        if event_name is None:
            event_name = caller_event_name(1)

        event = TelemetryEvent(
            event_name,
            EventKind.LOG,
            self._sinks,
            self._schema_validator,
            properties,
            clock=self._clock,
        )
        if level in _FAILURE_LEVELS:
            event.error(message, status_code, exception=exception, level=level)
        else:
            event.success(message, status_code, level=level)
        return event

    def flush(self) -> None:
        """Flush sinks that buffer output. Failures are logged, not raised."""
        self._for_each_sink("flush")

    def close(self) -> None:
        """Release sink resources. Failures are logged, not raised."""
        self._for_each_sink("close")

    def _for_each_sink(self, method_name: str) -> None:
        for sink in self._sinks:
            method = getattr(sink, method_name, None)
            if method is None:
                continue
            try:
                method()
            except Exception as e:
                logger.warning(
                    f"Sink {method_name} failed",
                    sink=getattr(sink, "name", type(sink).__name__),
                    error=str(e),
                )

    def _require_setup(self) -> None:
        if not self._is_setup_complete:
            raise TelemetryNotSetupError()
