# src/timber/telemetry/event.py
"""TelemetryEvent: a single unit of telemetry with exactly-once completion.

An event is created by TelemetryManager, collects properties while the
measured operation runs, and is completed exactly once with success() or
error(). Completion stamps the outcome and latency, then pushes the event
to every registered sink in registration order before returning.

State machine:
    OPEN --add_property()--> OPEN
    OPEN --success()/error()--> COMPLETING --(fan-out)--> COMPLETED

Any completion or mutation outside OPEN raises EventAlreadyCompletedError.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from enum import Enum, auto
from types import MappingProxyType
from typing import Any, TypeAlias

import structlog

from timber.clock import DEFAULT_CLOCK, Clock
from timber.contracts.enums import EventKind, LogLevel
from timber.telemetry.errors import EventAlreadyCompletedError
from timber.telemetry.protocols import SchemaValidatorProtocol, SinkProtocol

logger = structlog.get_logger(__name__)

PropertyValue: TypeAlias = (
    str
    | int
    | float
    | bool
    | None
    | list["PropertyValue"]
    | tuple["PropertyValue", ...]
    | Mapping[str, "PropertyValue"]
)

PropertiesInput: TypeAlias = Mapping[str, PropertyValue] | Iterable[tuple[str, PropertyValue]]


def _check_property_value(path: str, value: Any, containers: frozenset[int] = frozenset()) -> None:
    """Reject values that cannot be represented as structured telemetry.

    containers holds the ids of the lists, tuples and mappings enclosing
    value, so a container that includes itself is reported instead of
    recursing forever.

    Raises:
        TypeError: If value (or anything nested in it) is not a str, number,
            bool, None, list, tuple or string-keyed mapping, or if it
            contains itself.
    """
    if value is None or isinstance(value, str | int | float | bool):
        return
    if not isinstance(value, Mapping | list | tuple):
        raise TypeError(f"Property '{path}' has unsupported value type {type(value).__name__}")
    if id(value) in containers:
        raise TypeError(f"Property '{path}' contains a reference to itself")
    containers = containers | {id(value)}
    if isinstance(value, Mapping):
        for nested_key, nested_value in value.items():
            if not isinstance(nested_key, str):
                raise TypeError(f"Property '{path}' has non-string nested key {nested_key!r}")
            _check_property_value(f"{path}.{nested_key}", nested_value, containers)
    else:
        for index, item in enumerate(value):
            _check_property_value(f"{path}[{index}]", item, containers)


class _State(Enum):
    OPEN = auto()
    COMPLETING = auto()
    COMPLETED = auto()


class TelemetryEvent:
    """A telemetry event that is completed exactly once.

    Events should be created through TelemetryManager.new_metric() or
    TelemetryManager.log(), never directly by service code.

    Example:
        >>> metric = manager.new_metric("DocumentLoad", {"tenant_id": "t1"})
        >>> metric.add_property("document_id", "d42")
        >>> metric.success("Document loaded", status_code=200)
    """

    def __init__(
        self,
        event_name: str,
        kind: EventKind,
        sinks: Sequence[SinkProtocol],
        schema_validator: SchemaValidatorProtocol | None = None,
        properties: PropertiesInput | None = None,
        *,
        clock: Clock = DEFAULT_CLOCK,
    ) -> None:
        self._event_name = event_name
        self._type = kind
        self._sinks = tuple(sinks)
        self._schema_validator = schema_validator
        self._clock = clock
        self._start_time = clock.monotonic()
        self._timestamp = clock.now()
        self._state = _State.OPEN
        self._properties: dict[str, PropertyValue] = {}

        self._latency_ms: float | None = None
        self._successful: bool | None = None
        self._message: str | None = None
        self._status_code: str | None = None
        self._metadata: Mapping[str, Any] | None = None
        self._exception: BaseException | None = None
        self._log_level: LogLevel | None = None

        if properties is not None:
            items = properties.items() if isinstance(properties, Mapping) else properties
            for key, value in items:
                self.add_property(key, value)

    @property
    def event_name(self) -> str:
        return self._event_name

    @property
    def type(self) -> EventKind:
        return self._type

    @property
    def properties(self) -> Mapping[str, PropertyValue]:
        """Read-only view of the property bag."""
        return MappingProxyType(self._properties)

    @property
    def timestamp(self) -> datetime:
        """UTC wall-clock time at which the event was created."""
        return self._timestamp

    @property
    def latency_ms(self) -> float | None:
        return self._latency_ms

    @property
    def successful(self) -> bool | None:
        return self._successful

    @property
    def message(self) -> str | None:
        return self._message

    @property
    def status_code(self) -> str | None:
        return self._status_code

    @property
    def metadata(self) -> Mapping[str, Any] | None:
        return self._metadata

    @property
    def exception(self) -> BaseException | None:
        return self._exception

    @property
    def log_level(self) -> LogLevel | None:
        return self._log_level

    @property
    def completed(self) -> bool:
        return self._state is _State.COMPLETED

    def add_property(self, key: str, value: PropertyValue) -> TelemetryEvent:
        """Insert or overwrite a property.

        Args:
            key: Property name
            value: Structured property value

        Returns:
            This event, for chaining

        Raises:
            EventAlreadyCompletedError: If the event is completing or completed
            TypeError: If key is not a string or value is not a property value
        """
        if self._state is not _State.OPEN:
            raise EventAlreadyCompletedError(self._event_name)
        if not isinstance(key, str):
            raise TypeError(f"Property key must be a string, got {type(key).__name__}")
        _check_property_value(key, value)
        self._properties[key] = value
        return self

    def success(
        self,
        message: str,
        status_code: int | str | None = None,
        metadata: Mapping[str, Any] | None = None,
        level: LogLevel = LogLevel.INFO,
    ) -> None:
        """Complete the event successfully and emit it to every sink.

        Raises:
            EventAlreadyCompletedError: If the event was already completed
        """
        self._complete(message, status_code, metadata, level, successful=True)

    def error(
        self,
        message: str,
        status_code: int | str | None = None,
        metadata: Mapping[str, Any] | None = None,
        exception: BaseException | None = None,
        level: LogLevel = LogLevel.ERROR,
    ) -> None:
        """Complete the event as a failure and emit it to every sink.

        Raises:
            EventAlreadyCompletedError: If the event was already completed
        """
        self._complete(message, status_code, metadata, level, successful=False, exception=exception)

    def _complete(
        self,
        message: str,
        status_code: int | str | None,
        metadata: Mapping[str, Any] | None,
        level: LogLevel,
        *,
        successful: bool,
        exception: BaseException | None = None,
    ) -> None:
        if self._state is not _State.OPEN:
            raise EventAlreadyCompletedError(self._event_name)
        self._state = _State.COMPLETING

        self._message = message
        # Zero and empty-string codes are meaningful; only None means "no code".
        if status_code is not None:
            self._status_code = str(status_code)
        self._metadata = MappingProxyType(dict(metadata)) if metadata is not None else None
        self._log_level = level
        self._successful = successful
        self._exception = exception
        self._latency_ms = max(0.0, (self._clock.monotonic() - self._start_time) * 1000.0)

        try:
            self._validate_schema()
            self._emit_to_sinks()
        finally:
            self._state = _State.COMPLETED

    def _validate_schema(self) -> None:
        if self._schema_validator is None:
            return
        # The returned object may not be a ValidationResult
        try:
            result = self._schema_validator.validate(self.properties)
            passed = bool(result.passed)
            failed_properties = [] if passed else list(result.failed_properties)
        except Exception as e:
            logger.warning(
                "Telemetry schema validator raised",
                event_name=self._event_name,
                validator=type(self._schema_validator).__name__,
                error=f"{type(e).__name__}: {e}",
            )
            return
        if not passed:
            logger.warning(
                "Telemetry schema validation failed",
                event_name=self._event_name,
                failed_properties=failed_properties,
            )

    def _emit_to_sinks(self) -> None:
        for sink in self._sinks:
            try:
                sink.emit(self)
            except Exception as e:
                # One broken sink must not starve the others or break the caller
                logger.warning(
                    "Telemetry sink failed",
                    sink=getattr(sink, "name", type(sink).__name__),
                    event_name=self._event_name,
                    error=str(e),
                )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly snapshot of the event.

        Enums become their values, the timestamp becomes ISO 8601 and the
        exception becomes its repr.
        """
        return {
            "event_name": self._event_name,
            "type": self._type.value,
            "timestamp": self._timestamp.isoformat(),
            "properties": dict(self._properties),
            "latency_ms": self._latency_ms,
            "successful": self._successful,
            "message": self._message,
            "status_code": self._status_code,
            "metadata": dict(self._metadata) if self._metadata is not None else None,
            "exception": repr(self._exception) if self._exception is not None else None,
            "log_level": self._log_level.value if self._log_level is not None else None,
        }

    def __repr__(self) -> str:
        return f"TelemetryEvent(event_name={self._event_name!r}, type={self._type.value!r}, state={self._state.name})"
