"""
Dark mode preference

A single boolean kept in durable local storage under a fixed key. It is read
once at startup to seed the store and written synchronously whenever the
store toggles it.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from src.utils.message import Log

if TYPE_CHECKING:
    from src.infrastructure.persistence.sqlite.preferences_repository_impl import PreferencesRepository


DARK_MODE_KEY = "darkMode"


class BooleanSetting(ABC):
    """get()/set() capability over one durable boolean."""

    @abstractmethod
    def get(self) -> bool:
        pass

    @abstractmethod
    def set(self, value: bool) -> None:
        pass


class PreferenceBooleanSetting(BooleanSetting):
    """
    Boolean stored in the preferences table.

    Older installs stored the flag as the string "true"; that form is still
    accepted on read.

    Args:
        preferences_repo: Backing repository
        key: Preference key
        default: Value returned when nothing is stored
    """

    def __init__(self, preferences_repo: 'PreferencesRepository', key: str = DARK_MODE_KEY, default: bool = False):
        self._preferences_repo = preferences_repo
        self._key = key
        self._default = default

    @property
    def key(self) -> str:
        return self._key

    def get(self) -> bool:
        value = self._preferences_repo.get(self._key, self._default)
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)

    def set(self, value: bool) -> None:
        self._preferences_repo.set(self._key, bool(value))
        Log.debug(f"PreferenceBooleanSetting: '{self._key}' = {bool(value)}")


class InMemoryBooleanSetting(BooleanSetting):
    """Process-local flag for tests and ephemeral sessions."""

    def __init__(self, value: bool = False):
        self._value = value
        self.write_count = 0

    def get(self) -> bool:
        return self._value

    def set(self, value: bool) -> None:
        self._value = bool(value)
        self.write_count += 1
