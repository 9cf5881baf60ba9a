"""
Application Settings Module

Classes:
    BaseSettings: Base dataclass for settings schemas
    BaseSettingsManager: Base for settings managers persisted in preferences
    AppSettingsManager: Global application settings
    BooleanSetting: get()/set() capability over one durable flag (dark mode)

Functions:
    init_app_settings_manager: Create an AppSettingsManager instance
"""

from .base_settings import (
    BaseSettings,
    BaseSettingsManager,
    FieldValidator,
    ValidationResult,
    validated_field,
)
from .app_settings import (
    AppSettings,
    AppSettingsManager,
    init_app_settings_manager,
)
from .dark_mode_setting import (
    DARK_MODE_KEY,
    BooleanSetting,
    InMemoryBooleanSetting,
    PreferenceBooleanSetting,
)

__all__ = [
    'BaseSettings',
    'BaseSettingsManager',
    'FieldValidator',
    'ValidationResult',
    'validated_field',
    'AppSettings',
    'AppSettingsManager',
    'init_app_settings_manager',
    'DARK_MODE_KEY',
    'BooleanSetting',
    'InMemoryBooleanSetting',
    'PreferenceBooleanSetting',
]
