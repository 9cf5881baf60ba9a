"""
Application Bootstrap

Centralized service initialization and dependency injection.
Provides a single point for setting up the application architecture.
"""
import atexit
import os
from typing import Optional

from src.infrastructure.persistence.sqlite.database import Database
from src.infrastructure.persistence.sqlite.preferences_repository_impl import PreferencesRepository
from src.application.events.event_bus import EventBus, init_event_dispatcher
from src.application.settings.app_settings import AppSettingsManager, init_app_settings_manager
from src.application.settings.dark_mode_setting import PreferenceBooleanSetting
from src.features.log_entries.application import LogEntryGateway, seed_reference_data
from src.features.state.application import Store
from src.features.state.domain import actions
from src.features.sync.application import RemoteSyncAdapter
from src.features.sync.domain import DocumentStore
from src.features.sync.infrastructure import FirestoreRestStore, InMemoryDocumentStore
from src.features.timecode.application import ClockEngine
from src.shared.domain.entities import User
from src.utils.message import Log


FIRESTORE_API_KEY_ENV = "SISLOG_FIRESTORE_API_KEY"
FIRESTORE_ID_TOKEN_ENV = "SISLOG_FIRESTORE_ID_TOKEN"


class ServiceContainer:
    """Container for all application services"""

    def __init__(
        self,
        database: Database,
        preferences_repo: PreferencesRepository,
        app_settings_manager: AppSettingsManager,
        dark_mode_setting: PreferenceBooleanSetting,
        event_bus: EventBus,
        store: Store,
        clock_engine: ClockEngine,
        document_store: DocumentStore,
        sync_adapter: RemoteSyncAdapter,
        log_entry_gateway: LogEntryGateway,
    ):
        self.database = database
        self.preferences_repo = preferences_repo
        self.app_settings = app_settings_manager
        self.dark_mode_setting = dark_mode_setting
        self.event_bus = event_bus
        self.store = store
        self.clock_engine = clock_engine
        self.document_store = document_store
        self.sync_adapter = sync_adapter
        self.log_entry_gateway = log_entry_gateway
        self._started = False
        self._shut_down = False

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self, seed: Optional[bool] = None) -> None:
        """
        Seed sample data if requested, then start syncing and ticking.

        Args:
            seed: Overrides the seed_sample_data setting when not None
        """
        if self._started or self._shut_down:
            return
        self._started = True

        if seed is None:
            seed = self.app_settings.seed_sample_data
        if seed:
            try:
                seed_reference_data(self.document_store)
            except Exception as e:
                Log.error(f"ServiceContainer: Failed to seed sample data: {e}")

        self.sync_adapter.start()
        self.clock_engine.start()
        Log.info("ServiceContainer: Started")

    def shutdown(self) -> None:
        """
        Release every resource in dependency order.

        Stops subscriptions before closing the Store so that no late snapshot
        is applied, then flushes settings and closes the database.
        """
        if self._shut_down:
            return
        self._shut_down = True
        Log.info("ServiceContainer: Starting shutdown")

        steps = [
            ("sync adapter", self.sync_adapter.stop),
            ("clock engine", self.clock_engine.stop),
            ("log entry gateway", self.log_entry_gateway.shutdown),
            ("store", self.store.close),
            ("document store", self.document_store.close),
            ("settings", self.app_settings.force_save),
            ("database", self.database.close),
        ]
        for name, step in steps:
            try:
                step()
            except Exception as e:
                Log.warning(f"ServiceContainer: Error stopping {name}: {e}")

        Log.info("ServiceContainer: Shutdown complete")


def create_document_store(app_settings: AppSettingsManager, backend: Optional[str] = None) -> DocumentStore:
    """
    Build the remote store selected by settings.

    Firestore credentials are read from the environment so they never end up
    in the preferences table.
    """
    backend = backend or app_settings.remote_backend
    if backend == "firestore":
        return FirestoreRestStore(
            project_id=app_settings.firestore_project_id,
            database=app_settings.firestore_database,
            api_key=os.environ.get(FIRESTORE_API_KEY_ENV) or None,
            id_token=os.environ.get(FIRESTORE_ID_TOKEN_ENV) or None,
            poll_interval_seconds=app_settings.sync_poll_interval_ms / 1000.0,
            timeout=app_settings.request_timeout_seconds,
        )
    return InMemoryDocumentStore()


def initialize_services(
    db_path: str = None,
    document_store: Optional[DocumentStore] = None,
    backend: Optional[str] = None,
    register_atexit: bool = False,
) -> ServiceContainer:
    """
    Initialize all application services.

    Args:
        db_path: Path to SQLite database file.
                If None, uses default location in data directory.
        document_store: Remote store to use instead of the one selected by
                settings (tests pass an InMemoryDocumentStore)
        backend: Remote backend overriding the remote_backend setting
                for this session only ("memory" or "firestore")
        register_atexit: Also call shutdown() at interpreter exit

    Returns:
        ServiceContainer with all initialized services
    """
    if db_path is None:
        from src.utils.paths import get_database_path
        db_path = str(get_database_path("sislog"))

    Log.info(f"Initializing services with database: {db_path}")

    # Foundation
    init_event_dispatcher()
    database = Database(db_path)
    preferences_repo = PreferencesRepository(database)
    event_bus = EventBus()

    # Settings
    app_settings = init_app_settings_manager(preferences_repo)
    Log.set_level(app_settings.log_level)
    Log.enable_repetitive_filter(app_settings.filter_repetitive_logs)
    dark_mode_setting = PreferenceBooleanSetting(preferences_repo)
    Log.info("Bootstrap: Settings loaded")

    # State and clock
    store = Store(dark_mode_setting, event_bus=event_bus)
    if app_settings.operator_id:
        store.dispatch(actions.set_user(User(
            uid=app_settings.operator_id,
            display_name=app_settings.operator_name,
        )))
    clock_engine = ClockEngine(store, interval_ms=app_settings.clock_interval_ms)

    # Remote
    if document_store is None:
        document_store = create_document_store(app_settings, backend)
    sync_adapter = RemoteSyncAdapter(document_store, store, event_bus=event_bus)
    log_entry_gateway = LogEntryGateway(
        document_store,
        user_provider=lambda: store.state.current_user,
        event_bus=event_bus,
    )
    Log.info(f"Bootstrap: Remote backend '{type(document_store).__name__}' ready")

    container = ServiceContainer(
        database=database,
        preferences_repo=preferences_repo,
        app_settings_manager=app_settings,
        dark_mode_setting=dark_mode_setting,
        event_bus=event_bus,
        store=store,
        clock_engine=clock_engine,
        document_store=document_store,
        sync_adapter=sync_adapter,
        log_entry_gateway=log_entry_gateway,
    )

    if register_atexit:
        def cleanup_handler():
            try:
                container.shutdown()
            except Exception as e:
                Log.warning(f"Bootstrap: Error in atexit cleanup handler: {e}")
        atexit.register(cleanup_handler)

    return container
