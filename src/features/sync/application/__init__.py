"""
Application layer for the sync feature.
"""
from src.features.sync.application.sync_adapter import (
    ACTION_CATEGORIES,
    DEFAULT_BINDINGS,
    LOCATIONS,
    LOG_ENTRIES,
    PARTICIPANTS,
    TAGS,
    CollectionBinding,
    RemoteSyncAdapter,
)

__all__ = [
    'ACTION_CATEGORIES',
    'DEFAULT_BINDINGS',
    'LOCATIONS',
    'LOG_ENTRIES',
    'PARTICIPANTS',
    'TAGS',
    'CollectionBinding',
    'RemoteSyncAdapter',
]
