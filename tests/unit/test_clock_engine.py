"""
Unit tests for ClockEngine.

The wall clock is injected through now_fn so ticks are deterministic; the
QTimer is only exercised for start/stop bookkeeping.
"""
from datetime import datetime

import pytest

from src.application.settings import InMemoryBooleanSetting
from src.features.state.application.store import Store
from src.features.state.domain.app_state import TimecodeMode
from src.features.timecode.application.clock_engine import ClockEngine, DEFAULT_TICK_INTERVAL_MS
from src.features.timecode.domain.timecode import TimecodeFormatError, is_valid_timecode


class FakeClock:
    """Epoch seconds that only move when told to."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, milliseconds: float):
        self.now += milliseconds / 1000.0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(qapp):
    return Store(InMemoryBooleanSetting())


@pytest.fixture
def engine(store, clock):
    engine = ClockEngine(store, now_fn=clock)
    yield engine
    engine.stop()


class TestAutoMode:
    """AUTO mode derives the timecode from local time of day."""

    def test_tick_uses_local_time(self, engine, store, clock):
        moment = datetime(2024, 5, 1, 14, 30, 15, 500000)
        clock.now = moment.timestamp()
        assert engine.tick() == "14:30:15:15"
        assert store.state.current_timecode == "14:30:15:15"

    def test_tick_emits_timecode_changed(self, engine):
        emitted = []
        engine.timecode_changed.connect(emitted.append)
        timecode = engine.tick()
        assert emitted == [timecode]
        assert is_valid_timecode(timecode)


class TestManualMode:
    """MANUAL mode counts forward from an operator-supplied base."""

    def test_runs_forward_from_base(self, engine, store, clock):
        engine.set_manual("01:00:00:00")
        assert store.state.current_timecode == "01:00:00:00"

        clock.advance(2000)
        assert engine.tick() == "01:00:02:00"

    def test_explicit_anchor(self, engine, clock):
        engine.set_manual("00:10:00:00", anchor_epoch=clock.now - 1.5)
        assert engine.tick() == "00:10:01:15"

    def test_frames_advance_within_second(self, engine, clock):
        engine.set_manual("00:00:00:00")
        clock.advance(500)
        assert engine.tick() == "00:00:00:15"

    def test_set_manual_records_mode(self, engine, store, clock):
        engine.set_manual("02:00:00:00")
        mode_state = store.state.timecode_mode
        assert mode_state.mode == TimecodeMode.MANUAL
        assert mode_state.anchor_epoch == clock.now
        assert mode_state.base_timecode == "02:00:00:00"

    def test_malformed_base_is_rejected_without_state_change(self, engine, store):
        before = store.state
        with pytest.raises(TimecodeFormatError):
            engine.set_manual("1:00:00")
        assert store.state is before

    def test_set_auto_clears_manual(self, engine, store, clock):
        engine.set_manual("01:00:00:00")
        engine.set_auto()
        mode_state = store.state.timecode_mode
        assert mode_state.mode == TimecodeMode.AUTO
        assert mode_state.anchor_epoch is None
        assert mode_state.base_timecode is None

    def test_compute_timecode_is_pure(self, engine, store, clock):
        engine.set_manual("00:00:10:00")
        mode_state = store.state.timecode_mode
        assert engine.compute_timecode(mode_state, clock.now + 60) == "00:01:10:00"
        assert store.state.current_timecode == "00:00:10:00"


class TestTimer:
    """Start/stop bookkeeping."""

    def test_default_interval(self, engine):
        assert engine.interval_ms == DEFAULT_TICK_INTERVAL_MS == 33

    def test_start_ticks_immediately(self, engine, store, clock):
        engine.set_manual("03:00:00:00")
        clock.advance(1000)
        engine.start()
        assert engine.is_running
        assert store.state.current_timecode == "03:00:01:00"

    def test_stop(self, engine):
        stopped = []
        engine.stopped.connect(lambda: stopped.append(True))
        engine.start()
        engine.stop()
        assert not engine.is_running
        assert stopped == [True]

    def test_start_is_idempotent(self, engine):
        started = []
        engine.started.connect(lambda: started.append(True))
        engine.start()
        engine.start()
        assert started == [True]

    def test_set_interval(self, engine):
        engine.set_interval(100)
        assert engine.interval_ms == 100
