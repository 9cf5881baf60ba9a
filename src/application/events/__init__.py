"""Event system for application layer"""

from src.application.events.events import (
    DomainEvent,
    # Sync events
    SyncStarted,
    SyncStopped,
    SnapshotApplied,
    SyncErrorOccurred,
    # Clock events
    TimecodeModeChanged,
    # Preference events
    DarkModeChanged,
    # Mutation events
    LogEntryMutationCompleted,
    LogEntryMutationFailed,
)
from src.application.events.event_bus import (
    EventBus,
    call_on_main_thread,
    init_event_dispatcher,
)

__all__ = [
    "DomainEvent",
    "SyncStarted",
    "SyncStopped",
    "SnapshotApplied",
    "SyncErrorOccurred",
    "TimecodeModeChanged",
    "DarkModeChanged",
    "LogEntryMutationCompleted",
    "LogEntryMutationFailed",
    "EventBus",
    "call_on_main_thread",
    "init_event_dispatcher",
]
