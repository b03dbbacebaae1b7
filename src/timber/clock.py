# src/timber/clock.py
"""Clock abstraction for testable latency measurement.

Telemetry events measure latency between construction and completion.
Production code uses SystemClock (the default); tests inject MockClock to
control time advancement without sleeping.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    """Abstract clock used by telemetry events.

    Implementations:
    - SystemClock: Uses time.monotonic() and the system wall clock
    - MockClock: Returns controllable times (testing)
    """

    def monotonic(self) -> float:
        """Return monotonic time in seconds.

        Must never go backwards. Used for latency calculations only.
        """
        ...

    def now(self) -> datetime:
        """Return the current wall-clock time as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Production clock backed by time.monotonic() and datetime.now(UTC)."""

    def monotonic(self) -> float:
        return time.monotonic()

    def now(self) -> datetime:
        return datetime.now(tz=UTC)


class MockClock:
    """Controllable clock for deterministic testing.

    Example:
        clock = MockClock(start=0.0)
        event = manager.new_metric("DocumentLoad")  # with clock injected
        clock.advance(0.25)
        event.success("loaded")
        assert event.latency_ms == 250.0
    """

    def __init__(self, start: float = 0.0, wall: datetime | None = None) -> None:
        """Initialize mock clock.

        Args:
            start: Initial monotonic time value (default 0.0).
            wall: Wall-clock time reported by now(). Defaults to 2025-01-01 UTC.
        """
        self._current = start
        self._wall = wall if wall is not None else datetime(2025, 1, 1, tzinfo=UTC)

    def monotonic(self) -> float:
        return self._current

    def now(self) -> datetime:
        return self._wall

    def advance(self, seconds: float) -> None:
        """Advance mock time by specified seconds.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._current += seconds


# Default clock for production use
DEFAULT_CLOCK: Clock = SystemClock()
