"""
Unit tests for service bootstrap and the command-line entry point.
"""
import os
from unittest.mock import patch

import pytest

from src.application.bootstrap import ServiceContainer, create_document_store, initialize_services
from src.features.state.domain import actions
from src.features.sync.application import LOG_ENTRIES, PARTICIPANTS
from src.features.sync.infrastructure import FirestoreRestStore, InMemoryDocumentStore
from src.main import build_parser
from src.shared.domain.entities import NewLogEntry


@pytest.fixture
def container(qapp, tmp_path):
    container = initialize_services(
        db_path=str(tmp_path / "sislog.db"),
        document_store=InMemoryDocumentStore(),
    )
    yield container
    container.shutdown()


class TestInitializeServices:
    """initialize_services wires every component together."""

    def test_builds_container(self, container):
        assert isinstance(container, ServiceContainer)
        assert isinstance(container.document_store, InMemoryDocumentStore)
        assert container.store.state.dark_mode is False

    def test_start_syncs_and_ticks(self, container):
        container.start(seed=True)
        assert container.sync_adapter.is_running
        assert container.clock_engine.is_running
        assert len(container.store.state.participants) == 4
        assert len(container.store.state.tags) == 5

    def test_gateway_write_arrives_through_sync(self, container):
        container.start()
        result = container.log_entry_gateway.add_log_entry(NewLogEntry("01:00:00:00"))
        assert [e.id for e in container.store.state.log_entries] == [result.data]

    def test_update_of_missing_entry_leaves_store_unchanged(self, container):
        container.sync_adapter.start()
        container.log_entry_gateway.add_log_entry(NewLogEntry("01:00:00:00", notes="kept"))
        before = container.store.state

        result = container.log_entry_gateway.update_log_entry("missing", {"notes": "x"})

        assert result.is_not_found
        assert container.store.state is before
        assert [e.notes for e in container.store.state.log_entries] == ["kept"]

    def test_shutdown_stops_everything(self, container):
        container.start()
        container.shutdown()
        assert not container.sync_adapter.is_running
        assert not container.clock_engine.is_running
        assert container.store.is_closed
        assert container.database.is_closed
        assert container.log_entry_gateway.is_shut_down
        container.shutdown()

    def test_snapshot_after_shutdown_is_ignored(self, container):
        container.start()
        remote = container.document_store
        container.shutdown()
        remote.set(PARTICIPANTS, "p9", {"name": "Late"})
        assert container.store.state.participants == ()

    def test_dark_mode_survives_restart(self, qapp, tmp_path):
        db_path = str(tmp_path / "sislog.db")
        first = initialize_services(db_path=db_path, document_store=InMemoryDocumentStore())
        first.store.dispatch(actions.toggle_dark_mode())
        first.shutdown()

        second = initialize_services(db_path=db_path, document_store=InMemoryDocumentStore())
        assert second.store.state.dark_mode is True
        second.shutdown()

    def test_operator_becomes_current_user(self, qapp, tmp_path):
        db_path = str(tmp_path / "sislog.db")
        first = initialize_services(db_path=db_path, document_store=InMemoryDocumentStore())
        first.app_settings.operator_id = "op-1"
        first.shutdown()

        second = initialize_services(db_path=db_path, document_store=InMemoryDocumentStore())
        second.start()
        entry_id = second.log_entry_gateway.add_log_entry(NewLogEntry("00:00:01:00")).data
        assert second.document_store.get(LOG_ENTRIES, entry_id)["createdBy"] == "op-1"
        second.shutdown()


class TestCreateDocumentStore:
    """Backend selection."""

    def test_memory_is_default(self, container):
        assert isinstance(create_document_store(container.app_settings), InMemoryDocumentStore)

    def test_firestore_uses_environment_credentials(self, container):
        container.app_settings.firestore_project_id = "demo"
        env = {"SISLOG_FIRESTORE_API_KEY": "k", "SISLOG_FIRESTORE_ID_TOKEN": "t"}
        with patch.dict(os.environ, env):
            store = create_document_store(container.app_settings, backend="firestore")
        try:
            assert isinstance(store, FirestoreRestStore)
        finally:
            store.close()

    def test_firestore_without_project_fails(self, container):
        with pytest.raises(ValueError):
            create_document_store(container.app_settings, backend="firestore")


class TestCommandLine:
    """Argument parsing for the sislog entry point."""

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.backend is None
        assert args.seed is False

    def test_options(self):
        args = build_parser().parse_args(["--backend", "firestore", "--seed", "--log-level", "DEBUG"])
        assert args.backend == "firestore"
        assert args.seed is True
        assert args.log_level == "DEBUG"

    def test_rejects_unknown_backend(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--backend", "carrier-pigeon"])
