"""
In-memory DocumentStore

Process-local implementation used for offline sessions, demos and tests.
Listeners receive the full collection once on listen() and again after every
mutation of that collection. With auto_flush=False, deliveries are held until
flush(), which models propagation delay between a write and its snapshot.
"""
import threading
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from src.features.sync.domain.document_store import (
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    ErrorCallback,
    ListenerRegistration,
    SnapshotCallback,
    auto_id,
)
from src.utils.message import Log


class _MemoryListener(ListenerRegistration):
    def __init__(self, store: 'InMemoryDocumentStore', collection: str,
                 on_snapshot: SnapshotCallback, on_error: Optional[ErrorCallback]):
        self._store = store
        self.collection = collection
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def remove(self) -> None:
        if self._active:
            self._active = False
            self._store._remove_listener(self)


class InMemoryDocumentStore(DocumentStore):
    """
    Thread-safe in-memory document store.

    Args:
        auto_flush: Deliver snapshots synchronously after each write
        clock: Returns the commit time for server timestamps
    """

    def __init__(self, auto_flush: bool = True, clock: Callable[[], datetime] = None):
        self._lock = threading.RLock()
        self._collections: Dict[str, Dict[str, Tuple[Dict[str, Any], datetime]]] = {}
        self._listeners: List[_MemoryListener] = []
        self._dirty: Set[str] = set()
        self._auto_flush = auto_flush
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # =========================================================================
    # Listening
    # =========================================================================

    def listen(self, collection: str, on_snapshot: SnapshotCallback,
               on_error: Optional[ErrorCallback] = None) -> ListenerRegistration:
        listener = _MemoryListener(self, collection, on_snapshot, on_error)
        with self._lock:
            self._listeners.append(listener)
            snapshot = self._snapshot(collection)
        Log.debug(f"InMemoryDocumentStore: listening to '{collection}'")
        self._deliver(listener, snapshot)
        return listener

    def _remove_listener(self, listener: _MemoryListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def listener_count(self, collection: Optional[str] = None) -> int:
        with self._lock:
            return sum(1 for l in self._listeners if collection is None or l.collection == collection)

    def flush(self) -> None:
        """Deliver snapshots for every collection changed since the last flush."""
        with self._lock:
            dirty = sorted(self._dirty)
            self._dirty.clear()
        for collection in dirty:
            self._notify(collection)

    def _changed(self, collection: str) -> None:
        if self._auto_flush:
            self._notify(collection)
        else:
            with self._lock:
                self._dirty.add(collection)

    def _notify(self, collection: str) -> None:
        with self._lock:
            listeners = [l for l in self._listeners if l.collection == collection]
            snapshot = self._snapshot(collection)
        for listener in listeners:
            self._deliver(listener, snapshot)

    def _deliver(self, listener: _MemoryListener, snapshot: List[DocumentSnapshot]) -> None:
        if not listener.active:
            return
        try:
            listener.on_snapshot(snapshot)
        except Exception as e:
            Log.error(f"InMemoryDocumentStore: listener for '{listener.collection}' raised: {e}")

    def _snapshot(self, collection: str) -> List[DocumentSnapshot]:
        documents = self._collections.get(collection, {})
        return [
            DocumentSnapshot(id=doc_id, data=deepcopy(data), update_time=updated)
            for doc_id, (data, updated) in documents.items()
        ]

    # =========================================================================
    # Reads and writes
    # =========================================================================

    def list(self, collection: str) -> List[DocumentSnapshot]:
        with self._lock:
            return self._snapshot(collection)

    def get(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._collections.get(collection, {}).get(document_id)
            return deepcopy(entry[0]) if entry else None

    def add(self, collection: str, data: Dict[str, Any], server_timestamp_fields: tuple = ("createdAt",)) -> str:
        now = self._clock()
        document = deepcopy(data)
        for name in server_timestamp_fields:
            document[name] = now
        with self._lock:
            documents = self._collections.setdefault(collection, {})
            document_id = auto_id()
            while document_id in documents:
                document_id = auto_id()
            documents[document_id] = (document, now)
        Log.debug(f"InMemoryDocumentStore: added {collection}/{document_id}")
        self._changed(collection)
        return document_id

    def set(self, collection: str, document_id: str, data: Dict[str, Any]) -> None:
        now = self._clock()
        with self._lock:
            self._collections.setdefault(collection, {})[document_id] = (deepcopy(data), now)
        self._changed(collection)

    def update(self, collection: str, document_id: str, fields: Dict[str, Any]) -> None:
        now = self._clock()
        with self._lock:
            documents = self._collections.get(collection, {})
            if document_id not in documents:
                raise DocumentNotFoundError(collection, document_id)
            data, _ = documents[document_id]
            merged = dict(data)
            merged.update(deepcopy(fields))
            documents[document_id] = (merged, now)
        self._changed(collection)

    def delete(self, collection: str, document_id: str) -> None:
        with self._lock:
            documents = self._collections.get(collection, {})
            if document_id not in documents:
                raise DocumentNotFoundError(collection, document_id)
            del documents[document_id]
        self._changed(collection)

    def close(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener.remove()
        Log.debug("InMemoryDocumentStore: closed")
