"""
Unit tests for LogEntryGateway.

Writes go to an InMemoryDocumentStore; the Store is never touched by the
gateway, so visibility is checked on the remote side.
"""
import threading
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from src.application.api.result_types import CommandResult, ErrorCode
from src.application.events import EventBus, LogEntryMutationCompleted, LogEntryMutationFailed
from src.features.log_entries.application import ANONYMOUS_USER, LogEntryGateway, seed_reference_data
from src.features.sync.application import ACTION_CATEGORIES, LOCATIONS, LOG_ENTRIES, PARTICIPANTS, TAGS
from src.features.sync.domain import DocumentNotFoundError, RemoteStoreError
from src.features.sync.infrastructure import InMemoryDocumentStore
from src.shared.domain.entities import NewLogEntry, User


FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def remote():
    return InMemoryDocumentStore(clock=lambda: FIXED_NOW)


@pytest.fixture
def user():
    return {"value": User("u1", "op@example.com")}


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def gateway(remote, user, bus):
    gateway = LogEntryGateway(remote, user_provider=lambda: user["value"], event_bus=bus, clock=lambda: FIXED_NOW)
    yield gateway
    gateway.shutdown()


def _add_entries(gateway, count):
    return [gateway.add_log_entry(NewLogEntry(f"00:00:0{i}:00")).data for i in range(count)]


# =============================================================================
# Add / update
# =============================================================================

class TestAddLogEntry:
    """Tests for add_log_entry."""

    def test_add_returns_new_id(self, gateway, remote):
        result = gateway.add_log_entry(NewLogEntry(
            "01:00:00:00", participants={"p1", "p2"}, location="l1", action_category="a1",
            tags={"t1"}, notes="Dinner argument",
        ))
        assert result.success
        stored = remote.get(LOG_ENTRIES, result.data)
        assert stored["timecode"] == "01:00:00:00"
        assert stored["participants"] == ["p1", "p2"]
        assert stored["actionCategory"] == "a1"
        assert stored["createdBy"] == "u1"
        assert stored["createdAt"] == FIXED_NOW
        assert stored["timestamp"] == FIXED_NOW

    def test_created_by_falls_back_without_user(self, gateway, remote, user):
        user["value"] = None
        result = gateway.add_log_entry(NewLogEntry("01:00:00:00"))
        assert remote.get(LOG_ENTRIES, result.data)["createdBy"] == ANONYMOUS_USER

    def test_custom_fallback_identity(self, remote):
        gateway = LogEntryGateway(remote, user_provider=lambda: None, default_created_by="desk-2")
        result = gateway.add_log_entry(NewLogEntry("01:00:00:00"))
        assert remote.get(LOG_ENTRIES, result.data)["createdBy"] == "desk-2"

    def test_remote_failure_is_reported(self, user):
        remote = MagicMock()
        remote.add.side_effect = RemoteStoreError("offline", LOG_ENTRIES)
        gateway = LogEntryGateway(remote, user_provider=lambda: user["value"])
        result = gateway.add_log_entry(NewLogEntry("01:00:00:00"))
        assert result.failed
        assert result.error_code == ErrorCode.REMOTE_FAILURE

    def test_user_lookup_failure_is_reported(self, remote):
        gateway = LogEntryGateway(remote, user_provider=MagicMock(side_effect=RuntimeError("session expired")))
        result = gateway.add_log_entry(NewLogEntry("01:00:00:00"))
        assert result.failed
        assert result.error_code == ErrorCode.REMOTE_FAILURE
        assert remote.list(LOG_ENTRIES) == []

    def test_mixed_type_ids_are_invalid(self, gateway, remote):
        result = gateway.add_log_entry(NewLogEntry("01:00:00:00", participants={"p1", 3}))
        assert result.error_code == ErrorCode.INVALID_ARGUMENT
        assert remote.list(LOG_ENTRIES) == []

    def test_publishes_completed_event(self, gateway, bus):
        events = []
        bus.subscribe(LogEntryMutationCompleted, events.append)
        result = gateway.add_log_entry(NewLogEntry("01:00:00:00"))
        assert events[0].data == {"operation": "add", "entry_id": result.data, "count": None}


class TestUpdateLogEntry:
    """Tests for update_log_entry and update_log_entry_notes."""

    def test_partial_update_merges(self, gateway, remote):
        entry_id = gateway.add_log_entry(NewLogEntry("01:00:00:00", location="l1", notes="a")).data
        result = gateway.update_log_entry(entry_id, {"notes": "b", "action_category": "a2"})
        assert result.success
        stored = remote.get(LOG_ENTRIES, entry_id)
        assert stored["notes"] == "b"
        assert stored["actionCategory"] == "a2"
        assert stored["location"] == "l1"

    def test_sets_are_stored_sorted(self, gateway, remote):
        entry_id = _add_entries(gateway, 1)[0]
        gateway.update_log_entry(entry_id, {"tags": {"t3", "t1", "t1"}})
        assert remote.get(LOG_ENTRIES, entry_id)["tags"] == ["t1", "t3"]

    def test_missing_id_is_not_found(self, gateway):
        result = gateway.update_log_entry("missing", {"notes": "x"})
        assert result.failed
        assert result.is_not_found

    @pytest.mark.parametrize("fields", [{"id": "x"}, {"createdAt": FIXED_NOW}, {"bogus": 1}, {}])
    def test_rejects_invalid_fields(self, gateway, remote, fields):
        entry_id = _add_entries(gateway, 1)[0]
        before = remote.get(LOG_ENTRIES, entry_id)
        result = gateway.update_log_entry(entry_id, fields)
        assert result.error_code == ErrorCode.INVALID_ARGUMENT
        assert remote.get(LOG_ENTRIES, entry_id) == before

    def test_notes_are_trimmed(self, gateway, remote):
        entry_id = _add_entries(gateway, 1)[0]
        assert gateway.update_log_entry_notes(entry_id, "  edited  ").success
        assert remote.get(LOG_ENTRIES, entry_id)["notes"] == "edited"

    def test_blank_notes_rejected(self, gateway):
        entry_id = _add_entries(gateway, 1)[0]
        result = gateway.update_log_entry_notes(entry_id, "   ")
        assert result.error_code == ErrorCode.INVALID_ARGUMENT

    @pytest.mark.parametrize("fields", [
        {"tags": None},
        {"participants": 5},
        {"participants": "p1"},
        {"tags": ["t1", 2]},
        {"participants": [["p1"]]},
    ])
    def test_rejects_malformed_id_collections(self, gateway, remote, fields):
        entry_id = _add_entries(gateway, 1)[0]
        before = remote.get(LOG_ENTRIES, entry_id)
        result = gateway.update_log_entry(entry_id, fields)
        assert result.failed
        assert result.error_code == ErrorCode.INVALID_ARGUMENT
        assert remote.get(LOG_ENTRIES, entry_id) == before

    def test_rejects_non_mapping_fields(self, gateway):
        entry_id = _add_entries(gateway, 1)[0]
        assert gateway.update_log_entry(entry_id, ["notes"]).error_code == ErrorCode.INVALID_ARGUMENT

    def test_non_text_notes_rejected(self, gateway):
        entry_id = _add_entries(gateway, 1)[0]
        assert gateway.update_log_entry_notes(entry_id, 42).error_code == ErrorCode.INVALID_ARGUMENT


# =============================================================================
# Delete
# =============================================================================

class TestDelete:
    """Tests for the delete operations."""

    def test_delete_single(self, gateway, remote):
        entry_id = _add_entries(gateway, 1)[0]
        assert gateway.delete_log_entry(entry_id).success
        assert remote.get(LOG_ENTRIES, entry_id) is None

    def test_delete_missing_is_not_found(self, gateway, bus):
        events = []
        bus.subscribe(LogEntryMutationFailed, events.append)
        result = gateway.delete_log_entry("missing")
        assert result.is_not_found
        assert events[0].data["error_code"] == ErrorCode.NOT_FOUND.value

    def test_delete_all_removes_every_entry(self, gateway, remote):
        _add_entries(gateway, 5)
        result = gateway.delete_all_log_entries()
        assert result.success
        assert result.data == 5
        assert remote.list(LOG_ENTRIES) == []

    def test_delete_all_on_empty_collection(self, gateway):
        result = gateway.delete_all_log_entries()
        assert result.success
        assert result.data == 0

    def test_delete_all_stops_at_first_failure(self, user):
        remote = MagicMock()
        remote.list.return_value = [MagicMock(id=f"e{i}") for i in range(5)]
        remote.delete.side_effect = [None, None, RemoteStoreError("offline"), None, None]
        gateway = LogEntryGateway(remote, user_provider=lambda: user["value"])

        result = gateway.delete_all_log_entries()
        assert result.failed
        assert result.data == 2
        assert result.error_code == ErrorCode.REMOTE_FAILURE
        assert remote.delete.call_count == 3

    def test_delete_all_list_failure(self, user):
        remote = MagicMock()
        remote.list.side_effect = RemoteStoreError("offline")
        result = LogEntryGateway(remote, user_provider=lambda: user["value"]).delete_all_log_entries()
        assert result.failed
        assert result.data == 0

    @pytest.mark.parametrize("entry_ids", [None, "e1", [1, 2]])
    def test_delete_many_rejects_malformed_ids(self, gateway, entry_ids):
        result = gateway.delete_log_entries(entry_ids)
        assert result.error_code == ErrorCode.INVALID_ARGUMENT

    def test_delete_all_with_unreadable_listing(self, user):
        remote = MagicMock()
        remote.list.return_value = None
        result = LogEntryGateway(remote, user_provider=lambda: user["value"]).delete_all_log_entries()
        assert result.failed
        assert result.data == 0

    def test_delete_many_counts_removed(self, gateway, remote):
        ids = _add_entries(gateway, 3)
        result = gateway.delete_log_entries([ids[0], "missing", ids[2]])
        assert result.failed
        assert result.is_not_found
        assert result.data == 1
        assert remote.get(LOG_ENTRIES, ids[2]) is not None


# =============================================================================
# Asynchronous submission
# =============================================================================

class TestSubmit:
    """submit_* run on worker threads and deliver on the main thread."""

    def test_submit_add_delivers_result_on_main_loop(self, qapp, gateway, remote):
        results = []
        pending = gateway.submit_add(NewLogEntry("01:00:00:00"), callback=results.append)
        result = pending.wait(5.0)
        assert result.success
        assert pending.done
        assert results == []

        qapp.processEvents()
        assert len(results) == 1
        assert results[0].data == result.data
        assert remote.get(LOG_ENTRIES, result.data) is not None

    def test_submit_delete_all(self, qapp, gateway):
        _add_entries(gateway, 5)
        assert gateway.submit_delete_all().wait(5.0).data == 5

    def test_submit_delete_many_and_update(self, qapp, gateway):
        ids = _add_entries(gateway, 2)
        assert gateway.submit_update(ids[0], {"notes": "x"}).wait(5.0).success
        assert gateway.submit_delete(ids[1]).wait(5.0).success
        assert gateway.submit_delete_many([ids[0]]).wait(5.0).data == 1

    def test_submit_invalid_update_completes(self, qapp, gateway, remote):
        entry_id = _add_entries(gateway, 1)[0]
        results = []
        pending = gateway.submit_update(entry_id, {"participants": 5}, callback=results.append)

        result = pending.wait(5.0)
        assert pending.done
        assert result.error_code == ErrorCode.INVALID_ARGUMENT
        assert gateway.in_flight_count() == 0

        qapp.processEvents()
        assert results == [result]

    def test_submit_unexpected_error_completes(self, qapp, gateway, bus):
        failures = []
        bus.subscribe(LogEntryMutationFailed, failures.append)
        gateway.delete_all_log_entries = MagicMock(side_effect=RuntimeError("boom"))
        results = []
        pending = gateway.submit_delete_all(callback=results.append)

        result = pending.wait(5.0)
        assert pending.done
        assert result.failed
        assert result.error_code == ErrorCode.REMOTE_FAILURE
        assert gateway.in_flight_count() == 0

        qapp.processEvents()
        assert results == [result]
        assert failures[0].data["operation"] == "delete_all"

    def test_late_result_dropped_after_shutdown(self, qapp, user):
        release = threading.Event()
        remote = MagicMock()

        def slow_add(*args, **kwargs):
            release.wait(5.0)
            return "e1"

        remote.add.side_effect = slow_add
        gateway = LogEntryGateway(remote, user_provider=lambda: user["value"])
        callback = MagicMock()
        pending = gateway.submit_add(NewLogEntry("01:00:00:00"), callback=callback)

        gateway.shutdown()
        release.set()
        assert pending.wait(5.0).success
        qapp.processEvents()
        callback.assert_not_called()

    def test_submit_after_shutdown_fails_fast(self, gateway):
        gateway.shutdown()
        result = gateway.submit_add(NewLogEntry("01:00:00:00")).wait(0)
        assert result.error_code == ErrorCode.SHUT_DOWN
        assert gateway.is_shut_down


# =============================================================================
# Sample data
# =============================================================================

class TestSeedReferenceData:
    """seed_reference_data writes stable reference documents."""

    def test_seeds_all_reference_collections(self, remote):
        written = seed_reference_data(remote)
        assert written == {PARTICIPANTS: 4, LOCATIONS: 4, ACTION_CATEGORIES: 5, TAGS: 5}
        assert remote.get(PARTICIPANTS, "p1")["name"] == "Wagner Baiano"
        assert remote.get(TAGS, "t5")["name"] == "Importante"

    def test_seeding_twice_does_not_duplicate(self, remote):
        seed_reference_data(remote)
        seed_reference_data(remote)
        assert len(remote.list(LOCATIONS)) == 4


class TestCommandResult:
    """Result helpers used by the gateway."""

    def test_error_result_carries_code_and_data(self):
        result = CommandResult.error_result("nope", data=3, error_code=ErrorCode.NOT_FOUND)
        assert result.failed
        assert result.is_not_found
        assert result.data == 3

    def test_success_result(self):
        result = CommandResult.success_result("ok", data="e1")
        assert result.success
        assert result.error_code is None

    def test_not_found_error_type(self):
        error = DocumentNotFoundError(LOG_ENTRIES, "e1")
        assert error.collection == LOG_ENTRIES
