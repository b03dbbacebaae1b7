# tests/telemetry/fixtures.py
"""Reusable test doubles for telemetry testing.

These fixtures provide:
1. RecordingSink - In-memory sink that captures events and a snapshot of each
2. FailingSink - Sink whose emit() always raises
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from timber.telemetry.event import TelemetryEvent


class RecordingSink:
    """In-memory sink that captures events for test verification.

    Stores both the event objects and a to_dict() snapshot taken at emit
    time, so tests can check what the sink actually saw during fan-out.

    Example:
        sink = RecordingSink()
        manager = TelemetryManager.create([sink], None)
        manager.new_metric("Load").success("ok")
        sink.assert_event_emitted("Load", message="ok")
    """

    def __init__(self, name: str = "recording", calls: list[str] | None = None):
        self._name = name
        self.events: list[TelemetryEvent] = []
        self.snapshots: list[dict[str, Any]] = []
        self.flush_count = 0
        self.close_count = 0
        self.configured_with: dict[str, Any] | None = None
        # Shared call log lets tests check ordering across several sinks
        self._calls = calls

    @property
    def name(self) -> str:
        return self._name

    def configure(self, config: dict[str, Any]) -> None:
        self.configured_with = config

    def emit(self, event: TelemetryEvent) -> None:
        self.events.append(event)
        self.snapshots.append(event.to_dict())
        if self._calls is not None:
            self._calls.append(self._name)

    def flush(self) -> None:
        self.flush_count += 1

    def close(self) -> None:
        self.close_count += 1

    def assert_event_emitted(self, event_name: str, **filters: Any) -> dict[str, Any]:
        """Assert a snapshot with this name (and matching fields) was emitted."""
        for snapshot in self.snapshots:
            if snapshot["event_name"] != event_name:
                continue
            if all(snapshot.get(key) == value for key, value in filters.items()):
                return snapshot
        raise AssertionError(f"No {event_name} event matching {filters} in {self.snapshots}")


class FailingSink:
    """Sink whose every operation raises."""

    def __init__(self, name: str = "failing", calls: list[str] | None = None):
        self._name = name
        self.attempts = 0
        self._calls = calls

    @property
    def name(self) -> str:
        return self._name

    def emit(self, event: TelemetryEvent) -> None:
        self.attempts += 1
        if self._calls is not None:
            self._calls.append(self._name)
        raise RuntimeError(f"Simulated emit failure in {self._name}")

    def flush(self) -> None:
        raise RuntimeError(f"Simulated flush failure in {self._name}")

    def close(self) -> None:
        raise RuntimeError(f"Simulated close failure in {self._name}")
