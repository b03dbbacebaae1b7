# src/timber/telemetry/errors.py
"""Telemetry-specific exceptions.

Usage errors (completing an event twice, using the manager before setup)
raise immediately and are never retried. Sink failures during emission are
NOT represented here - they are logged and isolated by the emitting event.
"""


class TelemetryError(Exception):
    """Base class for telemetry usage and configuration errors."""


class EventAlreadyCompletedError(TelemetryError):
    """Raised when a telemetry event is completed or mutated after completion.

    A second completion usually means both a success and a failure path ran
    in the calling code.

    Attributes:
        event_name: Name of the event that was already completed
    """

    def __init__(self, event_name: str) -> None:
        self.event_name = event_name
        super().__init__(f"Telemetry event '{event_name}' has already been completed.")


class TelemetryAlreadySetupError(TelemetryError):
    """Raised when setup() is called on a manager that is already configured."""

    def __init__(self) -> None:
        super().__init__("TelemetryManager was already set up with a sink list and schema validator.")


class EmptySinkListError(TelemetryError):
    """Raised when setup() receives no sinks."""

    def __init__(self) -> None:
        super().__init__("The provided sink list is empty. Provide at least one telemetry sink.")


class TelemetryNotSetupError(TelemetryError):
    """Raised when events are requested from a manager that was never set up."""

    def __init__(self) -> None:
        super().__init__("TelemetryManager has not been set up yet. It requires a sink list and a schema validator.")


class TelemetrySinkError(TelemetryError):
    """Raised when a sink encounters a configuration or discovery error.

    This is raised during sink setup (configure/discovery), NOT during
    emission. emit() must not raise - failures there are logged instead.

    Attributes:
        sink_name: Name of the sink that failed
        message: Human-readable error description
    """

    def __init__(self, sink_name: str, message: str) -> None:
        self.sink_name = sink_name
        self.message = message
        super().__init__(f"Sink '{sink_name}' failed: {message}")
