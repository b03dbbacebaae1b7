# src/timber/telemetry/protocols.py
"""Protocol definitions for telemetry sinks and schema validators.

Sinks receive completed telemetry events and ship them somewhere (log
files, metrics backends, stdout). Schema validators check the shape of an
event's property bag before it is fanned out.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from timber.telemetry.event import TelemetryEvent


@runtime_checkable
class SinkProtocol(Protocol):
    """Protocol for telemetry sinks.

    Lifecycle:
        1. Discovery: timber_get_sinks hook returns sink classes
        2. Instantiation + configure() with sink-specific options
        3. Operation: emit() called once per completed event
        4. Shutdown: flush() then close(), when the sink provides them

    Error handling:
        - configure() MUST raise TelemetrySinkError on invalid options
        - emit() SHOULD NOT raise. If it does, the emitting event logs the
          failure and carries on with the remaining sinks.
    """

    @property
    def name(self) -> str:
        """Sink name used to reference the sink from configuration."""
        ...

    def emit(self, event: "TelemetryEvent") -> None:
        """Receive a completed telemetry event.

        Called synchronously, in registration order, before the completing
        call returns. The event is read-only; sinks must not keep it around
        for later mutation. Asynchronous work started here is fire-and-forget.

        Args:
            event: The completed telemetry event
        """
        ...


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating a property bag.

    Attributes:
        passed: True if every rule was satisfied
        failed_properties: Names of properties that failed validation
    """

    passed: bool
    failed_properties: tuple[str, ...] = ()


@runtime_checkable
class SchemaValidatorProtocol(Protocol):
    """Protocol for checking an event's property bag against a schema."""

    def validate(self, properties: Mapping[str, Any]) -> ValidationResult:
        """Validate event properties.

        Args:
            properties: Read-only view of the event's properties

        Returns:
            ValidationResult describing which properties failed, if any
        """
        ...
