"""
Shared domain entities used across multiple features.

Contains:
- User - the signed-in operator
- Participant, Location, ActionCategory, Tag - reference data
- LogEntry - a logged production event
- NewLogEntry - fields for an entry about to be created
"""
from src.shared.domain.entities.records import (
    ActionCategory,
    DocumentDecodeError,
    Location,
    LogEntry,
    NewLogEntry,
    Participant,
    Tag,
    User,
    decode_timestamp,
)

__all__ = [
    'ActionCategory',
    'DocumentDecodeError',
    'Location',
    'LogEntry',
    'NewLogEntry',
    'Participant',
    'Tag',
    'User',
    'decode_timestamp',
]
