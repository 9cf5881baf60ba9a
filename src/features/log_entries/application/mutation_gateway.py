"""
Log Entry Mutation Gateway

Translates log entry create/update/delete intents into remote store writes.

The gateway never touches the Store: a successful write becomes visible only
when the Sync Adapter delivers the next logEntries snapshot. Every operation
reports its outcome as a CommandResult instead of raising.

The synchronous methods block on the network. The submit_* variants run the
same call on a worker thread and hand the result to a callback on the main
thread; after shutdown() late results are logged and dropped.
"""
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from src.application.api.result_types import CommandResult, ErrorCode
from src.application.events.event_bus import EventBus, call_on_main_thread
from src.application.events.events import LogEntryMutationCompleted, LogEntryMutationFailed
from src.features.sync.application.sync_adapter import LOG_ENTRIES
from src.features.sync.domain.document_store import DocumentNotFoundError, DocumentStore, RemoteStoreError
from src.shared.domain.entities import NewLogEntry, User
from src.utils.message import Log


ANONYMOUS_USER = "anonymous"

# Accepted update keys -> stored field names
_UPDATABLE_FIELDS = {
    "timestamp": "timestamp",
    "timecode": "timecode",
    "participants": "participants",
    "location": "location",
    "action_category": "actionCategory",
    "actionCategory": "actionCategory",
    "tags": "tags",
    "notes": "notes",
}
_PROTECTED_FIELDS = {"id", "created_at", "createdAt"}
_ID_SET_FIELDS = {"participants", "tags"}

ResultCallback = Callable[[CommandResult], None]


def _id_list(key: str, value: Any) -> List[str]:
    """Sorted, de-duplicated ids; anything but a collection of strings is a ValueError."""
    if isinstance(value, (str, bytes, dict)) or not isinstance(value, Iterable):
        raise ValueError(f"Field '{key}' must be a collection of ids")
    items = list(value)
    if not all(isinstance(item, str) for item in items):
        raise ValueError(f"Field '{key}' must contain only string ids")
    return sorted(set(items))


class PendingMutation:
    """Handle for a mutation running on a worker thread."""

    def __init__(self, operation: str):
        self.operation = operation
        self._done = threading.Event()
        self._result: Optional[CommandResult] = None

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def result(self) -> Optional[CommandResult]:
        return self._result

    def wait(self, timeout: Optional[float] = None) -> Optional[CommandResult]:
        """Block until the remote call finishes; None on timeout."""
        self._done.wait(timeout)
        return self._result

    def _complete(self, result: CommandResult) -> None:
        self._result = result
        self._done.set()


class LogEntryGateway:
    """
    Remote CRUD for log entries.

    Args:
        document_store: Remote store receiving the writes
        user_provider: Returns the signed-in user; its uid becomes createdBy
        event_bus: Optional bus for LogEntryMutationCompleted/Failed
        clock: Returns the creation instant for new entries
        default_created_by: createdBy used when nobody is signed in
    """

    def __init__(
        self,
        document_store: DocumentStore,
        user_provider: Callable[[], Optional[User]],
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = None,
        default_created_by: str = ANONYMOUS_USER,
    ):
        self._document_store = document_store
        self._user_provider = user_provider
        self._event_bus = event_bus
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._default_created_by = default_created_by or ANONYMOUS_USER
        self._shut_down = False
        self._lock = threading.Lock()
        self._in_flight: List[PendingMutation] = []

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    # =========================================================================
    # Synchronous operations
    # =========================================================================

    def add_log_entry(self, entry: NewLogEntry) -> CommandResult[str]:
        """
        Create a log entry with a store-assigned id and creation time.

        Returns:
            CommandResult whose data is the new entry id
        """
        try:
            user = self._user_provider()
        except Exception as e:
            return self._failure("add", "Failed to resolve the current user", e)
        created_by = user.uid if user is not None and user.uid else self._default_created_by

        try:
            document = entry.to_document(created_by=created_by, now=self._clock())
        except (TypeError, ValueError) as e:
            return self._invalid(f"Invalid log entry: {e}")

        try:
            entry_id = self._document_store.add(LOG_ENTRIES, document, server_timestamp_fields=("createdAt",))
        except Exception as e:
            return self._failure("add", "Failed to add log entry", e)

        Log.info(f"LogEntryGateway: Added log entry {entry_id} at {entry.timecode}")
        self._publish_completed("add", entry_id=entry_id)
        return CommandResult.success_result("Log entry added", data=entry_id)

    def update_log_entry(self, entry_id: str, fields: Dict[str, Any]) -> CommandResult[None]:
        """
        Merge fields into an existing entry.

        Args:
            entry_id: Entry to update
            fields: Partial fields, snake_case or camelCase. id and
                createdAt cannot be changed.
        """
        try:
            document_fields = self._normalize_update(fields)
        except ValueError as e:
            return self._invalid(str(e))

        try:
            self._document_store.update(LOG_ENTRIES, entry_id, document_fields)
        except Exception as e:
            return self._failure("update", f"Failed to update log entry {entry_id}", e, entry_id=entry_id)

        Log.info(f"LogEntryGateway: Updated log entry {entry_id} ({', '.join(sorted(document_fields))})")
        self._publish_completed("update", entry_id=entry_id)
        return CommandResult.success_result("Log entry updated")

    def update_log_entry_notes(self, entry_id: str, notes: str) -> CommandResult[None]:
        """Replace an entry's notes; blank notes are rejected."""
        if notes is not None and not isinstance(notes, str):
            return self._invalid("Notes must be text")
        trimmed = (notes or "").strip()
        if not trimmed:
            return self._invalid("Notes cannot be empty")
        return self.update_log_entry(entry_id, {"notes": trimmed})

    def delete_log_entry(self, entry_id: str) -> CommandResult[None]:
        """Delete one entry. An absent id is a not-found failure."""
        try:
            self._document_store.delete(LOG_ENTRIES, entry_id)
        except Exception as e:
            return self._failure("delete", f"Failed to delete log entry {entry_id}", e, entry_id=entry_id)

        Log.info(f"LogEntryGateway: Deleted log entry {entry_id}")
        self._publish_completed("delete", entry_id=entry_id)
        return CommandResult.success_result("Log entry deleted")

    def delete_log_entries(self, entry_ids: Iterable[str]) -> CommandResult[int]:
        """
        Delete the given entries one at a time, stopping at the first failure.

        Returns:
            CommandResult whose data is the number of entries removed,
            on success and on failure alike
        """
        if isinstance(entry_ids, (str, bytes, dict)) or not isinstance(entry_ids, Iterable):
            return self._invalid("entry_ids must be a collection of ids")
        ids = list(entry_ids)
        if not all(isinstance(entry_id, str) for entry_id in ids):
            return self._invalid("entry_ids must contain only string ids")
        return self._delete_sequence("delete_many", ids)

    def delete_all_log_entries(self) -> CommandResult[int]:
        """
        List every entry, then delete them one at a time.

        Stops at the first failure; entries already deleted stay deleted.

        Returns:
            CommandResult whose data is the number of entries removed
        """
        try:
            entry_ids = [document.id for document in self._document_store.list(LOG_ENTRIES)]
        except Exception as e:
            return self._failure("delete_all", "Failed to list log entries", e, data=0)
        return self._delete_sequence("delete_all", entry_ids)

    def _delete_sequence(self, operation: str, entry_ids: List[str]) -> CommandResult[int]:
        removed = 0
        for entry_id in entry_ids:
            try:
                self._document_store.delete(LOG_ENTRIES, entry_id)
            except Exception as e:
                return self._failure(
                    operation,
                    f"Stopped after deleting {removed} of {len(entry_ids)} log entries",
                    e,
                    entry_id=entry_id,
                    data=removed,
                )
            removed += 1

        Log.info(f"LogEntryGateway: Deleted {removed} log entries")
        self._publish_completed(operation, count=removed)
        return CommandResult.success_result(f"Deleted {removed} log entries", data=removed)

    # =========================================================================
    # Asynchronous submission
    # =========================================================================

    def submit_add(self, entry: NewLogEntry, callback: Optional[ResultCallback] = None) -> PendingMutation:
        return self._submit("add", lambda: self.add_log_entry(entry), callback)

    def submit_update(self, entry_id: str, fields: Dict[str, Any],
                      callback: Optional[ResultCallback] = None) -> PendingMutation:
        return self._submit("update", lambda: self.update_log_entry(entry_id, fields), callback)

    def submit_delete(self, entry_id: str, callback: Optional[ResultCallback] = None) -> PendingMutation:
        return self._submit("delete", lambda: self.delete_log_entry(entry_id), callback)

    def submit_delete_many(self, entry_ids: Iterable[str],
                           callback: Optional[ResultCallback] = None) -> PendingMutation:
        ids = list(entry_ids) if isinstance(entry_ids, Iterable) else entry_ids
        return self._submit("delete_many", lambda: self.delete_log_entries(ids), callback)

    def submit_delete_all(self, callback: Optional[ResultCallback] = None) -> PendingMutation:
        return self._submit("delete_all", self.delete_all_log_entries, callback)

    def _submit(self, operation: str, call: Callable[[], CommandResult],
                callback: Optional[ResultCallback]) -> PendingMutation:
        pending = PendingMutation(operation)
        if self._shut_down:
            message = "Gateway is shut down"
            pending._complete(CommandResult.error_result(message, errors=[message], error_code=ErrorCode.SHUT_DOWN))
            return pending

        with self._lock:
            self._in_flight.append(pending)

        def run():
            result = CommandResult.error_result(f"'{operation}' was interrupted", error_code=ErrorCode.REMOTE_FAILURE)
            try:
                result = call()
            except Exception as e:
                result = self._failure(operation, f"Unexpected error in '{operation}'", e)
            finally:
                with self._lock:
                    if pending in self._in_flight:
                        self._in_flight.remove(pending)
                # Callback is posted before wait() returns
                if callback is not None:
                    call_on_main_thread(self._deliver, callback, operation, result,
                                        label=f"LogEntryGateway.{operation}")
                pending._complete(result)

        threading.Thread(target=run, daemon=True, name=f"LogEntryGateway-{operation}").start()
        return pending

    def _deliver(self, callback: ResultCallback, operation: str, result: CommandResult) -> None:
        if self._shut_down:
            Log.debug(f"LogEntryGateway: discarding '{operation}' result after shutdown")
            return
        callback(result)

    def in_flight_count(self) -> int:
        with self._lock:
            return len(self._in_flight)

    def shutdown(self) -> None:
        """Stop delivering results. In-flight remote calls run to completion."""
        if self._shut_down:
            return
        self._shut_down = True
        Log.info(f"LogEntryGateway: Shut down ({self.in_flight_count()} mutation(s) in flight)")

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _normalize_update(fields: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(fields, dict):
            raise ValueError("Fields must be a mapping of field name to value")
        if not fields:
            raise ValueError("No fields to update")

        document_fields: Dict[str, Any] = {}
        for key, value in fields.items():
            if key in _PROTECTED_FIELDS:
                raise ValueError(f"Field '{key}' cannot be updated")
            stored = _UPDATABLE_FIELDS.get(key)
            if stored is None:
                raise ValueError(f"Unknown log entry field '{key}'")
            if stored in _ID_SET_FIELDS:
                value = _id_list(key, value)
            document_fields[stored] = value
        return document_fields

    @staticmethod
    def _invalid(message: str) -> CommandResult:
        Log.warning(f"LogEntryGateway: {message}")
        return CommandResult.error_result(message, errors=[message], error_code=ErrorCode.INVALID_ARGUMENT)

    def _failure(self, operation: str, message: str, error: Exception,
                 entry_id: Optional[str] = None, data: Any = None) -> CommandResult:
        if isinstance(error, DocumentNotFoundError):
            code = ErrorCode.NOT_FOUND
            message = f"{message}: log entry '{error.document_id}' not found"
            Log.warning(f"LogEntryGateway: {message}")
        elif isinstance(error, RemoteStoreError):
            code = ErrorCode.REMOTE_FAILURE
            message = f"{message}: {error}"
            Log.error(f"LogEntryGateway: {message}")
        else:
            code = ErrorCode.REMOTE_FAILURE
            message = f"{message}: {error}"
            Log.error(f"LogEntryGateway: {message}", exc_info=True)

        if self._event_bus is not None:
            self._event_bus.publish(LogEntryMutationFailed(data={
                "operation": operation,
                "entry_id": entry_id,
                "message": message,
                "error_code": code.value,
            }))
        return CommandResult.error_result(message, errors=[str(error)], data=data, error_code=code)

    def _publish_completed(self, operation: str, entry_id: Optional[str] = None, count: Optional[int] = None) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(LogEntryMutationCompleted(data={
                "operation": operation,
                "entry_id": entry_id,
                "count": count,
            }))
