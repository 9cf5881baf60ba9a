"""
Unit tests for EventBus and the main-thread call helper.
"""
from unittest.mock import MagicMock

from src.application.events import EventBus, SnapshotApplied, SyncStopped, call_on_main_thread
from src.application.events.event_bus import is_main_thread


class TestEventBus:
    """Tests for subscribe/publish."""

    def test_publish_reaches_subscriber(self, qapp):
        bus = EventBus()
        handler = MagicMock()
        bus.subscribe(SnapshotApplied, handler)
        event = SnapshotApplied(data={"collection": "tags", "count": 2})
        bus.publish(event)
        handler.assert_called_once_with(event)

    def test_subscribe_by_name(self, qapp):
        bus = EventBus()
        handler = MagicMock()
        bus.subscribe("SyncStopped", handler)
        bus.publish(SyncStopped())
        handler.assert_called_once()

    def test_duplicate_subscription_is_ignored(self, qapp):
        bus = EventBus()
        handler = MagicMock()
        bus.subscribe(SyncStopped, handler)
        bus.subscribe(SyncStopped, handler)
        assert bus.get_subscriber_count(SyncStopped) == 1

    def test_unsubscribe(self, qapp):
        bus = EventBus()
        handler = MagicMock()
        bus.subscribe(SyncStopped, handler)
        bus.unsubscribe(SyncStopped, handler)
        bus.publish(SyncStopped())
        handler.assert_not_called()
        assert bus.get_subscriber_count(SyncStopped) == 0

    def test_failing_handler_does_not_stop_others(self, qapp):
        bus = EventBus()
        second = MagicMock()
        bus.subscribe(SyncStopped, MagicMock(side_effect=RuntimeError("boom")))
        bus.subscribe(SyncStopped, second)
        bus.publish(SyncStopped())
        second.assert_called_once()

    def test_background_publish_runs_handler_on_main_thread(self, qapp, run_in_thread):
        bus = EventBus()
        threads = []
        bus.subscribe(SyncStopped, lambda event: threads.append(is_main_thread()))
        run_in_thread(bus.publish, SyncStopped())
        assert threads == []
        qapp.processEvents()
        assert threads == [True]

    def test_clear(self, qapp):
        bus = EventBus()
        bus.subscribe(SyncStopped, MagicMock())
        bus.clear()
        assert bus.get_subscriber_count(SyncStopped) == 0


class TestCallOnMainThread:
    """call_on_main_thread runs inline on the main thread, queued otherwise."""

    def test_inline_on_main_thread(self, qapp):
        calls = []
        call_on_main_thread(calls.append, 1)
        assert calls == [1]

    def test_queued_from_background_in_order(self, qapp, run_in_thread):
        calls = []

        def produce():
            for i in range(5):
                call_on_main_thread(calls.append, i)

        run_in_thread(produce)
        qapp.processEvents()
        assert calls == [0, 1, 2, 3, 4]
