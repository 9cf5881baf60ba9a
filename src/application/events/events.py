"""
Domain Events

Events that represent significant occurrences in the application.
Used for loose coupling between the sync, clock and mutation components
and whatever front end observes them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict


@dataclass
class DomainEvent:
    """Base class for all domain events"""
    name: ClassVar[str] = "DomainEvent"
    data: Dict[str, Any] = field(default_factory=dict)


# Sync events
@dataclass
class SyncStarted(DomainEvent):
    name: ClassVar[str] = "SyncStarted"


@dataclass
class SyncStopped(DomainEvent):
    name: ClassVar[str] = "SyncStopped"


@dataclass
class SnapshotApplied(DomainEvent):
    """
    A collection snapshot was decoded and dispatched into the store.

    Data fields:
        - collection: Remote collection name
        - count: Number of records dispatched
        - skipped: Number of documents that failed to decode
    """
    name: ClassVar[str] = "SnapshotApplied"


@dataclass
class SyncErrorOccurred(DomainEvent):
    """
    A live subscription reported an error.

    Data fields:
        - collection: Remote collection name
        - error: Error message
    """
    name: ClassVar[str] = "SyncErrorOccurred"


# Clock events
@dataclass
class TimecodeModeChanged(DomainEvent):
    """
    Data fields:
        - mode: "AUTO" or "MANUAL"
        - base_timecode: Manual base timecode, or None
        - anchor_epoch: Manual anchor in epoch seconds, or None
    """
    name: ClassVar[str] = "TimecodeModeChanged"


# Preference events
@dataclass
class DarkModeChanged(DomainEvent):
    name: ClassVar[str] = "DarkModeChanged"


# Log entry mutation events
@dataclass
class LogEntryMutationCompleted(DomainEvent):
    """
    Data fields:
        - operation: "add", "update", "delete", "delete_all" or "delete_many"
        - entry_id: Affected entry id (single-entry operations)
        - count: Entries removed (bulk operations)
    """
    name: ClassVar[str] = "LogEntryMutationCompleted"


@dataclass
class LogEntryMutationFailed(DomainEvent):
    """
    Data fields:
        - operation: Operation name
        - message: Failure message
        - error_code: ErrorCode value
    """
    name: ClassVar[str] = "LogEntryMutationFailed"
