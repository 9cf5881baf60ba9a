"""
Base Settings Manager

Settings schemas are dataclasses whose fields all have defaults. A manager
loads one schema from the preferences table under "<namespace>.settings",
validates every change against the field's rules and writes the whole schema
back after a short debounce.

Stored payloads written by older versions load as long as they validate:
keys that no longer exist are ignored and new keys take their defaults.
"""
from dataclasses import dataclass, asdict, fields, field
from typing import Optional, Dict, Any, Type, List, Union, TYPE_CHECKING

from PyQt6.QtCore import QObject, pyqtSignal, QTimer

from src.utils.message import Log

if TYPE_CHECKING:
    from src.infrastructure.persistence.sqlite.preferences_repository_impl import PreferencesRepository


Number = Union[int, float]


# =============================================================================
# Field rules
# =============================================================================

@dataclass
class ValidationResult:
    """Errors collected while checking one field or a whole schema."""
    errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class FieldValidator:
    """
    Rules for one settings field, attached through field metadata.

    Attributes:
        min_value: Inclusive lower bound for numbers
        max_value: Inclusive upper bound for numbers
        choices: Allowed values
        required: Reject None and blank strings
    """
    min_value: Optional[Number] = None
    max_value: Optional[Number] = None
    choices: Optional[List[Any]] = None
    required: bool = False

    def check(self, name: str, value: Any) -> List[str]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return [f"{name}: a value is required"] if self.required else []

        errors = []
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if self.min_value is not None and value < self.min_value:
                errors.append(f"{name}: {value} is below the minimum of {self.min_value}")
            if self.max_value is not None and value > self.max_value:
                errors.append(f"{name}: {value} is above the maximum of {self.max_value}")
        if self.choices is not None and value not in self.choices:
            errors.append(f"{name}: '{value}' is not one of {', '.join(map(str, self.choices))}")
        return errors


def validated_field(default: Any = None, *, min_value: Optional[Number] = None,
                    max_value: Optional[Number] = None, choices: Optional[List[Any]] = None,
                    required: bool = False):
    """
    Dataclass field carrying a FieldValidator.

    Example:
        clock_interval_ms: int = validated_field(33, min_value=1, max_value=1000)
    """
    rules = FieldValidator(min_value=min_value, max_value=max_value, choices=choices, required=required)
    return field(default=default, metadata={"validator": rules})


def _rules_for(settings_field) -> Optional[FieldValidator]:
    rules = settings_field.metadata.get("validator")
    return rules if isinstance(rules, FieldValidator) else None


@dataclass
class BaseSettings:
    """Base for settings schemas."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseSettings':
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def validate(self, only: Optional[str] = None) -> ValidationResult:
        """
        Check field rules.

        Args:
            only: Restrict the check to one field name

        Raises:
            AttributeError: If `only` names no field of this schema
        """
        selected = [f for f in fields(self) if only is None or f.name == only]
        if only is not None and not selected:
            raise AttributeError(f"{self.__class__.__name__} has no setting '{only}'")

        result = ValidationResult()
        for settings_field in selected:
            rules = _rules_for(settings_field)
            if rules is not None:
                result.errors.extend(rules.check(settings_field.name, getattr(self, settings_field.name)))
        return result

    def is_valid(self) -> bool:
        return self.validate().valid


# =============================================================================
# Manager
# =============================================================================

class BaseSettingsManager(QObject):
    """
    Loads, validates and persists one settings schema.

    Subclasses set NAMESPACE and SETTINGS_CLASS and expose typed properties
    whose setters go through set().
    """

    settings_changed = pyqtSignal(str)  # name of the changed setting
    validation_failed = pyqtSignal(object)  # ValidationResult

    NAMESPACE: str = ""
    SETTINGS_CLASS: Type[BaseSettings] = BaseSettings

    SAVE_DEBOUNCE_MS: int = 300

    def __init__(self, preferences_repo: Optional['PreferencesRepository'] = None, parent=None):
        """
        Args:
            preferences_repo: Backing store; None keeps settings in memory only
            parent: Parent QObject
        """
        super().__init__(parent)
        if not self.NAMESPACE:
            raise ValueError(f"{self.__class__.__name__} must define NAMESPACE")

        self._preferences_repo = preferences_repo
        self._settings: BaseSettings = self.SETTINGS_CLASS()
        self._loaded = False

        self._save_timer = QTimer(self)
        self._save_timer.setSingleShot(True)
        self._save_timer.setInterval(self.SAVE_DEBOUNCE_MS)
        self._save_timer.timeout.connect(self._write)

        self._load()

    @property
    def _storage_key(self) -> str:
        return f"{self.NAMESPACE}.settings"

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self._settings, key, default)

    def set(self, key: str, value: Any) -> bool:
        """
        Change one setting.

        The new value is checked against the field's rules; a rejected value
        leaves the old one in place and emits validation_failed.

        Returns:
            True if the stored value changed
        """
        if not hasattr(self._settings, key):
            Log.warning(f"{self.__class__.__name__}: Unknown setting '{key}'")
            return False

        previous = getattr(self._settings, key)
        if previous == value:
            return False

        setattr(self._settings, key, value)
        result = self._settings.validate(only=key)
        if not result.valid:
            setattr(self._settings, key, previous)
            Log.warning(f"{self.__class__.__name__}: {'; '.join(result.errors)}")
            self.validation_failed.emit(result)
            return False

        self._save_timer.start()
        self.settings_changed.emit(key)
        return True

    def is_loaded(self) -> bool:
        return self._loaded

    def force_save(self):
        """Write pending changes now instead of after the debounce."""
        self._save_timer.stop()
        self._write()

    def _load(self):
        stored = self._preferences_repo.get(self._storage_key, {}) if self._preferences_repo else {}
        if isinstance(stored, dict) and stored:
            candidate = self.SETTINGS_CLASS.from_dict(stored)
            result = candidate.validate()
            if result.valid:
                self._settings = candidate
            else:
                Log.warning(
                    f"{self.__class__.__name__}: Ignoring stored settings ({'; '.join(result.errors)})"
                )
        self._loaded = True

    def _write(self):
        if self._preferences_repo is None:
            return
        try:
            self._preferences_repo.set(self._storage_key, self._settings.to_dict())
        except Exception as e:
            Log.error(f"{self.__class__.__name__}: Failed to save settings: {e}")
