"""
Application Settings Manager

Global settings for a SisLog installation: which remote store to talk to,
how often to poll it, clock cadence, operator identity and logging.

Usage:
    app_settings = AppSettingsManager(preferences_repo)

    # Read settings
    backend = app_settings.remote_backend

    # Write settings (auto-saves)
    app_settings.sync_poll_interval_ms = 500
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .base_settings import BaseSettings, BaseSettingsManager, validated_field

if TYPE_CHECKING:
    from src.infrastructure.persistence.sqlite.preferences_repository_impl import PreferencesRepository


REMOTE_BACKENDS = ["memory", "firestore"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass
class AppSettings(BaseSettings):
    """
    Global application settings schema.

    All fields have defaults so older stored payloads still load.
    """

    # Remote store
    remote_backend: str = validated_field("memory", choices=REMOTE_BACKENDS)
    firestore_project_id: str = ""
    firestore_database: str = validated_field("(default)", required=True)
    sync_poll_interval_ms: int = validated_field(1000, min_value=100, max_value=60000)
    request_timeout_seconds: float = validated_field(10.0, min_value=1.0, max_value=120.0)

    # Clock
    clock_interval_ms: int = validated_field(33, min_value=1, max_value=1000)

    # Operator identity recorded as createdBy on new entries
    operator_id: str = ""
    operator_name: str = ""

    # Startup behavior
    seed_sample_data: bool = False

    # Developer settings
    log_level: str = validated_field("INFO", choices=LOG_LEVELS)
    filter_repetitive_logs: bool = True


class AppSettingsManager(BaseSettingsManager):
    """
    Manager for global application settings.

    Created once in bootstrap and stored in the ServiceContainer.
    """

    NAMESPACE = "app"
    SETTINGS_CLASS = AppSettings

    # =========================================================================
    # Remote Store
    # =========================================================================

    @property
    def remote_backend(self) -> str:
        return self._settings.remote_backend

    @remote_backend.setter
    def remote_backend(self, value: str):
        self.set("remote_backend", value.lower())

    @property
    def firestore_project_id(self) -> str:
        return self._settings.firestore_project_id

    @firestore_project_id.setter
    def firestore_project_id(self, value: str):
        self.set("firestore_project_id", value.strip())

    @property
    def firestore_database(self) -> str:
        return self._settings.firestore_database

    @firestore_database.setter
    def firestore_database(self, value: str):
        self.set("firestore_database", value)

    @property
    def sync_poll_interval_ms(self) -> int:
        return self._settings.sync_poll_interval_ms

    @sync_poll_interval_ms.setter
    def sync_poll_interval_ms(self, value: int):
        self.set("sync_poll_interval_ms", int(value))

    @property
    def request_timeout_seconds(self) -> float:
        return self._settings.request_timeout_seconds

    @request_timeout_seconds.setter
    def request_timeout_seconds(self, value: float):
        self.set("request_timeout_seconds", float(value))

    # =========================================================================
    # Clock
    # =========================================================================

    @property
    def clock_interval_ms(self) -> int:
        return self._settings.clock_interval_ms

    @clock_interval_ms.setter
    def clock_interval_ms(self, value: int):
        self.set("clock_interval_ms", int(value))

    # =========================================================================
    # Operator
    # =========================================================================

    @property
    def operator_id(self) -> str:
        return self._settings.operator_id

    @operator_id.setter
    def operator_id(self, value: str):
        self.set("operator_id", value.strip())

    @property
    def operator_name(self) -> str:
        return self._settings.operator_name

    @operator_name.setter
    def operator_name(self, value: str):
        self.set("operator_name", value)

    # =========================================================================
    # Startup / Developer
    # =========================================================================

    @property
    def seed_sample_data(self) -> bool:
        return self._settings.seed_sample_data

    @seed_sample_data.setter
    def seed_sample_data(self, value: bool):
        self.set("seed_sample_data", bool(value))

    @property
    def log_level(self) -> str:
        return self._settings.log_level

    @log_level.setter
    def log_level(self, value: str):
        self.set("log_level", value.upper())

    @property
    def filter_repetitive_logs(self) -> bool:
        return self._settings.filter_repetitive_logs

    @filter_repetitive_logs.setter
    def filter_repetitive_logs(self, value: bool):
        self.set("filter_repetitive_logs", bool(value))


def init_app_settings_manager(preferences_repo: 'PreferencesRepository') -> AppSettingsManager:
    """
    Create an AppSettingsManager instance.

    Factory, not a singleton: the instance is stored in the ServiceContainer.
    """
    return AppSettingsManager(preferences_repo)
