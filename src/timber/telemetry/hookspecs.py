# src/timber/telemetry/hookspecs.py
"""pluggy hook specifications for telemetry sinks.

Sink plugins implement these hooks to register sink classes with the
factory, which instantiates and configures them from settings.

Usage (implementing a sink plugin):
    from timber.telemetry.hookspecs import hookimpl

    class MySinkPlugin:
        @hookimpl
        def timber_get_sinks(self):
            return [MySink]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from timber.telemetry.protocols import SinkProtocol

PROJECT_NAME = "timber"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class TimberTelemetrySpec:
    """Hook specifications for telemetry sink plugins."""

    @hookspec
    def timber_get_sinks(self) -> list[type["SinkProtocol"]]:  # type: ignore[empty-body]
        """Return telemetry sink classes.

        Returns:
            List of sink classes (not instances) that implement SinkProtocol
            and can be constructed without arguments
        """
