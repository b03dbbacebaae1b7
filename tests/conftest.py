# tests/conftest.py
"""Shared test fixtures and Hypothesis configuration.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import os
from collections.abc import Iterator, MutableMapping
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings
from structlog.testing import capture_logs

from timber.clock import MockClock
from timber.telemetry.manager import TelemetryManager
from tests.telemetry.fixtures import RecordingSink

# =============================================================================
# Shared TelemetryManager isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_shared_telemetry_manager() -> Iterator[None]:
    """Give every test a fresh shared TelemetryManager.

    The shared instance is write-once, so tests that call the
    module-level timber.telemetry functions would otherwise leak setup state
    into each other.
    """
    TelemetryManager._instance = None
    yield
    TelemetryManager._instance = None


@pytest.fixture(autouse=True)
def _capture_structlog() -> Iterator[list[MutableMapping[str, Any]]]:
    """Keep timber's diagnostics out of captured stdout/stderr.

    Unconfigured structlog prints to stdout, where it would interleave with
    ConsoleSink output. Tests that assert on diagnostics open their own
    capture_logs() block, which nests inside this one.
    """
    with capture_logs() as logs:
        yield logs


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def mock_clock() -> MockClock:
    return MockClock(start=100.0)


@pytest.fixture
def manager(recording_sink: RecordingSink, mock_clock: MockClock) -> TelemetryManager:
    """Configured manager with a single RecordingSink, no validator and a MockClock."""
    return TelemetryManager.create([recording_sink], None, clock=mock_clock)


# =============================================================================
# Hypothesis profiles
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
