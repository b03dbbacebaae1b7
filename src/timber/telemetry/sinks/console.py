# src/timber/telemetry/sinks/console.py
"""Console sink for telemetry events.

Writes completed events to stdout or stderr as JSON lines or one readable
line per event. Primarily used for local debugging and tests.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TextIO

import structlog

from timber.telemetry.sinks.options import ConsoleSinkOptions, parse_sink_options

if TYPE_CHECKING:
    from timber.telemetry.event import TelemetryEvent

logger = structlog.get_logger(__name__)


class ConsoleSink:
    """Write telemetry events to stdout/stderr.

    Supports two output formats:
    - json: One JSON object per line (for machine processing)
    - pretty: [TIMESTAMP] LEVEL event_name: message (details)

    Configuration options (see ConsoleSinkOptions):
        format: "json" (default) or "pretty"
        output: "stdout" (default) or "stderr"

    Example configuration:
        telemetry:
          sinks:
            - name: console
              options:
                format: pretty
                output: stderr
    """

    _name = "console"

    def __init__(self) -> None:
        self._options = ConsoleSinkOptions()

    @property
    def name(self) -> str:
        return self._name

    @property
    def options(self) -> ConsoleSinkOptions:
        return self._options

    def configure(self, config: Mapping[str, Any]) -> None:
        """Replace the options with validated values from config.

        Raises:
            TelemetrySinkError: If an option is unknown or has an invalid value
        """
        self._options = parse_sink_options(self._name, ConsoleSinkOptions, config)

    @property
    def stream(self) -> TextIO:
        # Resolved per write so a replaced sys.stdout (e.g. pytest capsys) is honoured
        return sys.stdout if self._options.output == "stdout" else sys.stderr

    def emit(self, event: TelemetryEvent) -> None:
        """Write a single event. Never raises; failures are logged."""
        try:
            if self._options.format == "json":
                line = json.dumps(event.to_dict(), default=str)
            else:
                line = self._format_pretty(event)
            print(line, file=self.stream)
        except Exception as e:
            logger.warning(
                "Failed to write telemetry event",
                sink=self._name,
                event_name=event.event_name,
                error=str(e),
            )

    def _format_pretty(self, event: TelemetryEvent) -> str:
        level = event.log_level.value.upper() if event.log_level is not None else "-"
        head = f"[{event.timestamp.isoformat()}] {level} {event.event_name}: {event.message}"

        details = []
        if event.status_code is not None:
            details.append(f"status_code={event.status_code}")
        if event.latency_ms is not None:
            details.append(f"latency_ms={event.latency_ms:.1f}")
        for key in sorted(event.properties):
            details.append(f"{key}={event.properties[key]}")
        if event.exception is not None:
            details.append(f"exception={event.exception!r}")

        if details:
            return f"{head} ({', '.join(details)})"
        return head

    def flush(self) -> None:
        try:
            self.stream.flush()
        except Exception as e:
            logger.warning("Failed to flush console stream", sink=self._name, error=str(e))

    def close(self) -> None:
        """No-op: the console sink does not own stdout/stderr."""
        pass
