"""
Unit tests for the State Store.

Dispatch on the main thread completes synchronously; dispatch from other
threads is queued and applied by the Qt event loop.
"""
from unittest.mock import MagicMock

import pytest

from src.application.events import DarkModeChanged, EventBus, TimecodeModeChanged
from src.application.settings import InMemoryBooleanSetting
from src.features.state.application.store import Store
from src.features.state.domain import actions
from src.features.state.domain.app_state import AppState, TimecodeMode
from src.shared.domain.entities import Participant


@pytest.fixture
def dark_mode():
    return InMemoryBooleanSetting(False)


@pytest.fixture
def store(qapp, dark_mode):
    return Store(dark_mode)


class TestStoreDispatch:
    """Tests for dispatch, listeners and the state_changed signal."""

    def test_initial_state_reads_stored_dark_mode(self, qapp):
        assert Store(InMemoryBooleanSetting(True)).state.dark_mode is True

    def test_explicit_initial_state(self, qapp, dark_mode):
        initial = AppState(current_timecode="01:00:00:00")
        assert Store(dark_mode, initial_state=initial).state is initial

    def test_dispatch_on_main_thread_is_synchronous(self, store):
        store.dispatch(actions.set_participants([Participant("p1", "Ana")]))
        assert store.state.participants == (Participant("p1", "Ana"),)

    def test_listener_receives_new_state(self, store):
        received = []
        store.subscribe(received.append)
        store.dispatch(actions.set_timecode("00:00:01:00"))
        assert [s.current_timecode for s in received] == ["00:00:01:00"]

    def test_unsubscribe_stops_notifications(self, store):
        received = []
        unsubscribe = store.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        store.dispatch(actions.set_timecode("00:00:01:00"))
        assert received == []

    def test_unchanged_state_does_not_notify(self, store):
        listener = MagicMock()
        store.subscribe(listener)
        store.dispatch(actions.set_tags("not a list"))
        listener.assert_not_called()

    def test_state_changed_signal(self, store):
        emitted = []
        store.state_changed.connect(emitted.append)
        store.dispatch(actions.set_recording(True))
        assert len(emitted) == 1
        assert emitted[0].is_recording is True

    def test_failing_listener_does_not_block_others(self, store):
        second = MagicMock()
        store.subscribe(MagicMock(side_effect=RuntimeError("boom")))
        store.subscribe(second)
        store.dispatch(actions.set_timecode("00:00:02:00"))
        second.assert_called_once()
        assert store.state.current_timecode == "00:00:02:00"

    def test_dispatch_from_background_thread_is_applied_on_main_loop(self, qapp, store, run_in_thread):
        run_in_thread(store.dispatch, actions.set_timecode("02:00:00:00"))
        qapp.processEvents()
        assert store.state.current_timecode == "02:00:00:00"

    def test_background_dispatches_apply_in_order(self, qapp, store, run_in_thread):
        def produce():
            for frame in range(10):
                store.dispatch(actions.set_timecode(f"00:00:00:{frame:02d}"))

        seen = []
        store.subscribe(lambda s: seen.append(s.current_timecode))
        run_in_thread(produce)
        qapp.processEvents()
        assert seen == [f"00:00:00:{frame:02d}" for frame in range(10)]


class TestDarkModePersistence:
    """TOGGLE_DARK_MODE writes the durable flag."""

    def test_toggle_persists_new_value_before_dispatch_returns(self, store, dark_mode):
        store.dispatch(actions.toggle_dark_mode())
        assert store.state.dark_mode is True
        assert dark_mode.get() is True
        store.dispatch(actions.toggle_dark_mode())
        assert dark_mode.get() is False
        assert dark_mode.write_count == 2

    def test_other_actions_do_not_write_flag(self, store, dark_mode):
        store.dispatch(actions.set_timecode("00:00:00:01"))
        assert dark_mode.write_count == 0

    def test_write_failure_leaves_state_unchanged(self, qapp):
        setting = MagicMock()
        setting.get.return_value = False
        setting.set.side_effect = OSError("disk full")
        bus = EventBus()
        events = []
        bus.subscribe(DarkModeChanged, events.append)
        store = Store(setting, event_bus=bus)
        before = store.state
        listener = MagicMock()
        store.subscribe(listener)

        store.dispatch(actions.toggle_dark_mode())

        assert store.state is before
        assert store.state.dark_mode is False
        listener.assert_not_called()
        assert events == []

    def test_publishes_dark_mode_changed(self, qapp, dark_mode):
        bus = EventBus()
        events = []
        bus.subscribe(DarkModeChanged, events.append)
        Store(dark_mode, event_bus=bus).dispatch(actions.toggle_dark_mode())
        assert [e.data["dark_mode"] for e in events] == [True]


class TestStoreEvents:
    """Events published by the Store."""

    def test_manual_transition_publishes_mode(self, qapp, dark_mode):
        bus = EventBus()
        events = []
        bus.subscribe(TimecodeModeChanged, events.append)
        store = Store(dark_mode, event_bus=bus)
        store.dispatch(actions.set_manual_timecode(True, 50.0, "01:00:00:00"))
        assert events[0].data == {
            "mode": TimecodeMode.MANUAL.value,
            "base_timecode": "01:00:00:00",
            "anchor_epoch": 50.0,
        }


class TestStoreClose:
    """Tests for close()."""

    def test_dispatch_after_close_is_discarded(self, store):
        store.close()
        store.dispatch(actions.set_timecode("05:00:00:00"))
        assert store.is_closed
        assert store.state.current_timecode == "00:00:00:00"

    def test_queued_dispatch_discarded_after_close(self, qapp, store, run_in_thread):
        run_in_thread(store.dispatch, actions.set_timecode("05:00:00:00"))
        store.close()
        qapp.processEvents()
        assert store.state.current_timecode == "00:00:00:00"
