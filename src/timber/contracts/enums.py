"""Levels and kinds shared between telemetry producers and sinks."""

from enum import StrEnum


class LogLevel(StrEnum):
    """Severity attached to a completed telemetry event.

    Warning and Error route log records through the failure path.
    """

    VERBOSE = "verbose"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class EventKind(StrEnum):
    """Kind of telemetry event.

    Metrics span an operation and are completed explicitly by the caller.
    Logs are created and completed in a single call.
    """

    METRIC = "metric"
    LOG = "log"
