"""Built-in telemetry sinks.

Available sinks:
- ConsoleSink: Write events to stdout/stderr for debugging
- LoggerSink: Forward events to a structlog logger

Plugin registration:
    Sinks are registered via the timber_get_sinks hook.
    BuiltinSinksPlugin in this module registers all built-in sinks.
"""

from timber.telemetry.hookspecs import hookimpl
from timber.telemetry.sinks.console import ConsoleSink
from timber.telemetry.sinks.logger import LoggerSink


class BuiltinSinksPlugin:
    """Plugin that registers built-in telemetry sinks."""

    @hookimpl
    def timber_get_sinks(self) -> list[type]:
        return [ConsoleSink, LoggerSink]


__all__ = [
    "BuiltinSinksPlugin",
    "ConsoleSink",
    "LoggerSink",
]
