"""
Remote Sync Adapter

Keeps the Store's five collection slices in step with the remote store.

For each bound collection it holds one live subscription. Every snapshot is
decoded in full and dispatched as a full-replace SET_* action: no diffing,
no merging, the last snapshot wins. Collections update independently.

Snapshots may arrive on any thread; they are applied on the main thread.
Once stop() has been called, snapshots still in flight are dropped.
"""
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from src.application.events.event_bus import EventBus, call_on_main_thread
from src.application.events.events import SnapshotApplied, SyncErrorOccurred, SyncStarted, SyncStopped
from src.features.state.application.store import Store
from src.features.state.domain import actions
from src.features.state.domain.actions import Action
from src.features.sync.domain.document_store import DocumentSnapshot, DocumentStore, ListenerRegistration
from src.shared.domain.entities import (
    ActionCategory,
    DocumentDecodeError,
    Location,
    LogEntry,
    Participant,
    Tag,
)
from src.utils.message import Log


PARTICIPANTS = "participants"
LOCATIONS = "locations"
ACTION_CATEGORIES = "actionCategories"
TAGS = "tags"
LOG_ENTRIES = "logEntries"


@dataclass(frozen=True)
class CollectionBinding:
    """
    Maps one remote collection onto one Store slice.

    Attributes:
        collection: Remote collection name
        decode: (document id, fields) -> record
        make_action: records -> full-replace action
    """
    collection: str
    decode: Callable[[str, dict], object]
    make_action: Callable[[Sequence[object]], Action]


DEFAULT_BINDINGS: Tuple[CollectionBinding, ...] = (
    CollectionBinding(PARTICIPANTS, Participant.from_document, actions.set_participants),
    CollectionBinding(LOCATIONS, Location.from_document, actions.set_locations),
    CollectionBinding(ACTION_CATEGORIES, ActionCategory.from_document, actions.set_action_categories),
    CollectionBinding(TAGS, Tag.from_document, actions.set_tags),
    CollectionBinding(LOG_ENTRIES, LogEntry.from_document, actions.set_log_entries),
)


class RemoteSyncAdapter(QObject):
    """
    Subscribes to remote collections and feeds full snapshots into the Store.

    Signals:
        snapshot_applied(str, int): Collection name and record count
        sync_error(str, str): Collection name and error message

    Args:
        document_store: Remote store to subscribe to
        store: Store receiving SET_* actions
        event_bus: Optional bus for SnapshotApplied/SyncErrorOccurred
        bindings: Collections to mirror; defaults to the five standard ones
    """

    snapshot_applied = pyqtSignal(str, int)
    sync_error = pyqtSignal(str, str)

    def __init__(
        self,
        document_store: DocumentStore,
        store: Store,
        event_bus: Optional[EventBus] = None,
        bindings: Sequence[CollectionBinding] = DEFAULT_BINDINGS,
        parent=None,
    ):
        super().__init__(parent)
        self._document_store = document_store
        self._store = store
        self._event_bus = event_bus
        self._bindings = tuple(bindings)
        self._registrations: List[ListenerRegistration] = []
        self._running = False
        # Bumped on stop(); snapshots tagged with an older generation are stale
        self._generation = 0
        self._snapshot_counts: Dict[str, int] = {b.collection: 0 for b in self._bindings}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def collections(self) -> List[str]:
        return [binding.collection for binding in self._bindings]

    def snapshot_count(self, collection: str) -> int:
        """Number of snapshots applied for a collection since construction."""
        return self._snapshot_counts.get(collection, 0)

    def start(self) -> None:
        """Open one live subscription per bound collection. Idempotent."""
        if self._running:
            return
        self._running = True
        generation = self._generation

        for binding in self._bindings:
            registration = self._document_store.listen(
                binding.collection,
                lambda documents, b=binding: self._on_snapshot(b, generation, documents),
                lambda error, b=binding: self._on_error(b, generation, error),
            )
            self._registrations.append(registration)

        Log.info(f"SyncAdapter: Started ({', '.join(self.collections)})")
        if self._event_bus is not None:
            self._event_bus.publish(SyncStarted(data={"collections": self.collections}))

    def stop(self) -> None:
        """Remove every subscription and discard snapshots still in flight."""
        if not self._running:
            return
        self._running = False
        self._generation += 1

        registrations, self._registrations = self._registrations, []
        for registration in registrations:
            try:
                registration.remove()
            except Exception as e:
                Log.error(f"SyncAdapter: Error removing listener: {e}")

        Log.info("SyncAdapter: Stopped")
        if self._event_bus is not None:
            self._event_bus.publish(SyncStopped())

    # =========================================================================
    # Snapshot handling
    # =========================================================================

    def _is_current(self, generation: int) -> bool:
        return self._running and generation == self._generation

    def _on_snapshot(self, binding: CollectionBinding, generation: int, documents: List[DocumentSnapshot]) -> None:
        if not self._is_current(generation):
            Log.debug(f"SyncAdapter: dropping late '{binding.collection}' snapshot")
            return

        records = []
        skipped = 0
        for document in documents:
            try:
                records.append(binding.decode(document.id, document.data))
            except DocumentDecodeError as e:
                skipped += 1
                Log.warning(f"SyncAdapter: {e}")

        call_on_main_thread(
            self._apply, binding, generation, records, skipped,
            label=f"SyncAdapter.apply:{binding.collection}",
        )

    def _apply(self, binding: CollectionBinding, generation: int, records: list, skipped: int) -> None:
        if not self._is_current(generation):
            Log.debug(f"SyncAdapter: dropping stale '{binding.collection}' snapshot")
            return

        self._store.dispatch(binding.make_action(records))
        self._snapshot_counts[binding.collection] = self._snapshot_counts.get(binding.collection, 0) + 1
        Log.debug(f"SyncAdapter: applied {len(records)} {binding.collection} (skipped {skipped})")

        self.snapshot_applied.emit(binding.collection, len(records))
        if self._event_bus is not None:
            self._event_bus.publish(SnapshotApplied(data={
                "collection": binding.collection,
                "count": len(records),
                "skipped": skipped,
            }))

    def _on_error(self, binding: CollectionBinding, generation: int, error: Exception) -> None:
        if not self._is_current(generation):
            return
        Log.error(f"SyncAdapter: '{binding.collection}' subscription error: {error}")
        call_on_main_thread(self._report_error, binding.collection, str(error),
                            label=f"SyncAdapter.error:{binding.collection}")

    def _report_error(self, collection: str, message: str) -> None:
        self.sync_error.emit(collection, message)
        if self._event_bus is not None:
            self._event_bus.publish(SyncErrorOccurred(data={"collection": collection, "error": message}))
