# tests/property/telemetry/test_completion_properties.py
"""Property-based tests for telemetry completion and fan-out.

These tests verify, for arbitrary inputs:
1. Exactly-once completion: any second completion raises and the first
   outcome is preserved
2. Every sink receives each completed event exactly once, in order, even
   when some sinks fail
3. Status codes are normalized to str without dropping falsy codes
4. log() routes Warning/Error to the failure path and everything else to
   the success path
5. The property bag reflects the last write per key
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st
from hypothesis.stateful import RuleBasedStateMachine, invariant, precondition, rule

from timber.clock import MockClock
from timber.contracts.enums import LogLevel
from timber.telemetry import TelemetryManager
from timber.telemetry.errors import EventAlreadyCompletedError
from tests.telemetry.fixtures import FailingSink, RecordingSink

# =============================================================================
# Strategies
# =============================================================================

_keys = st.text(min_size=1, max_size=12)

_scalars = st.none() | st.booleans() | st.integers() | st.floats(allow_nan=False) | st.text(max_size=20)

_property_values = st.recursive(
    _scalars,
    lambda children: st.lists(children, max_size=3) | st.dictionaries(_keys, children, max_size=3),
    max_leaves=8,
)

_status_codes = st.none() | st.integers(min_value=-1, max_value=999) | st.text(max_size=5)

_levels = st.sampled_from(list(LogLevel))

# True = healthy RecordingSink, False = FailingSink
_sink_layouts = st.lists(st.booleans(), min_size=1, max_size=6)


def _build_sinks(layout: list[bool], calls: list[str]) -> list[RecordingSink | FailingSink]:
    return [
        RecordingSink(f"sink-{i}", calls) if healthy else FailingSink(f"sink-{i}", calls)
        for i, healthy in enumerate(layout)
    ]


# =============================================================================
# Properties
# =============================================================================


@given(layout=_sink_layouts, status_code=_status_codes, succeed_first=st.booleans())
def test_second_completion_always_rejected(layout: list[bool], status_code, succeed_first: bool) -> None:
    calls: list[str] = []
    sinks = _build_sinks(layout, calls)
    manager = TelemetryManager.create(sinks, None, clock=MockClock())
    event = manager.new_metric("Op")

    if succeed_first:
        event.success("first", status_code)
    else:
        event.error("first", status_code)

    try:
        if succeed_first:
            event.error("second", 1)
        else:
            event.success("second", 1)
    except EventAlreadyCompletedError as e:
        assert e.event_name == "Op"
    else:
        raise AssertionError("second completion was accepted")

    assert event.message == "first"
    assert event.successful is succeed_first
    assert calls == [sink.name for sink in sinks]


@given(layout=_sink_layouts)
def test_every_sink_called_once_in_order(layout: list[bool]) -> None:
    calls: list[str] = []
    sinks = _build_sinks(layout, calls)
    manager = TelemetryManager.create(sinks, None, clock=MockClock())

    manager.new_metric("Op").success("ok")

    assert calls == [f"sink-{i}" for i in range(len(layout))]
    for sink in sinks:
        if isinstance(sink, RecordingSink):
            assert len(sink.events) == 1


@given(status_code=_status_codes)
def test_status_code_normalization(status_code) -> None:
    manager = TelemetryManager.create([RecordingSink()], None, clock=MockClock())
    event = manager.new_metric("Op")

    event.success("ok", status_code)

    if status_code is None:
        assert event.status_code is None
    else:
        assert event.status_code == str(status_code)


@given(level=_levels, message=st.text(max_size=30))
def test_log_routes_by_level(level: LogLevel, message: str) -> None:
    sink = RecordingSink()
    manager = TelemetryManager.create([sink], None, clock=MockClock())

    event = manager.log(message, level, event_name="Routed")

    expected = level not in (LogLevel.WARNING, LogLevel.ERROR)
    assert event.successful is expected
    assert event.log_level is level
    assert sink.snapshots[0]["message"] == message


@given(writes=st.lists(st.tuples(_keys, _property_values), max_size=20))
def test_properties_last_write_wins(writes) -> None:
    manager = TelemetryManager.create([RecordingSink()], None, clock=MockClock())
    event = manager.new_metric("Op")

    for key, value in writes:
        event.add_property(key, value)

    assert dict(event.properties) == dict(writes)


# =============================================================================
# State machine
# =============================================================================


class TelemetryEventStateMachine(RuleBasedStateMachine):
    """Drives one event through random property writes and completions."""

    def __init__(self) -> None:
        super().__init__()
        self.sink = RecordingSink()
        self.clock = MockClock()
        manager = TelemetryManager.create([self.sink], None, clock=self.clock)
        self.event = manager.new_metric("Machine")
        self.expected_properties: dict[str, object] = {}
        self.outcome: bool | None = None

    @rule(key=_keys, value=_scalars)
    def add_property(self, key: str, value) -> None:
        if self.outcome is None:
            self.event.add_property(key, value)
            self.expected_properties[key] = value
        else:
            try:
                self.event.add_property(key, value)
            except EventAlreadyCompletedError:
                pass
            else:
                raise AssertionError("mutation accepted after completion")

    @rule(seconds=st.floats(min_value=0.0, max_value=10.0))
    def advance_clock(self, seconds: float) -> None:
        self.clock.advance(seconds)

    @precondition(lambda self: self.outcome is None)
    @rule(successful=st.booleans())
    def complete(self, successful: bool) -> None:
        if successful:
            self.event.success("done")
        else:
            self.event.error("done")
        self.outcome = successful

    @precondition(lambda self: self.outcome is not None)
    @rule(successful=st.booleans())
    def complete_again(self, successful: bool) -> None:
        try:
            if successful:
                self.event.success("again")
            else:
                self.event.error("again")
        except EventAlreadyCompletedError:
            pass
        else:
            raise AssertionError("second completion accepted")

    @invariant()
    def outcome_matches(self) -> None:
        assert self.event.successful is self.outcome
        assert self.event.completed is (self.outcome is not None)
        assert len(self.sink.events) == (0 if self.outcome is None else 1)
        assert dict(self.event.properties) == self.expected_properties
        if self.outcome is not None:
            assert self.event.latency_ms is not None
            assert self.event.latency_ms >= 0.0


TestTelemetryEventStateMachine = TelemetryEventStateMachine.TestCase
