"""
Cloud Firestore DocumentStore over the v1 REST API

Writes map onto single REST calls:
- add: documents:commit with an exists=false precondition and a
  REQUEST_TIME transform for server timestamp fields
- update: PATCH with an update mask and an exists=true precondition
- delete: DELETE with an exists=true precondition

Live subscriptions are emulated by polling each collection on a background
thread and delivering the full snapshot whenever membership or any document
updateTime changes. Failed polls back off exponentially and keep retrying
until the listener is removed.
"""
import threading
from typing import Any, Dict, List, Optional, Tuple

import httpx

from src.features.sync.domain.document_store import (
    DocumentNotFoundError,
    DocumentSnapshot,
    DocumentStore,
    ErrorCallback,
    ListenerRegistration,
    RemoteStoreError,
    SnapshotCallback,
    auto_id,
)
from src.features.sync.infrastructure.firestore_values import FirestoreValueError, decode_fields, encode_fields
from src.shared.domain.entities import decode_timestamp
from src.utils.message import Log


FIRESTORE_API_URL = "https://firestore.googleapis.com/v1"
DEFAULT_PAGE_SIZE = 300
MAX_POLL_BACKOFF_SECONDS = 30.0


class _PollingListener(ListenerRegistration):
    """Background thread polling one collection."""

    def __init__(self, store: 'FirestoreRestStore', collection: str, on_snapshot: SnapshotCallback,
                 on_error: Optional[ErrorCallback], interval_seconds: float):
        self._store = store
        self.collection = collection
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._interval = interval_seconds
        self._stop_event = threading.Event()
        self._fingerprint: Optional[Tuple] = None
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name=f"FirestorePoll-{collection}"
        )

    def start(self) -> None:
        self._thread.start()

    @property
    def active(self) -> bool:
        return not self._stop_event.is_set()

    def remove(self) -> None:
        if self._stop_event.is_set():
            return
        self._stop_event.set()
        self._store._forget_listener(self)
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout=2.0)

    def poll_once(self) -> bool:
        """
        Fetch the collection and deliver it if it changed.

        Returns:
            True if a snapshot was delivered
        """
        documents = self._store.list(self.collection)
        fingerprint = tuple(sorted(
            (doc.id, doc.update_time.isoformat() if doc.update_time else "") for doc in documents
        ))
        if fingerprint == self._fingerprint:
            Log.debug(f"FirestoreRestStore: poll unchanged '{self.collection}'")
            return False
        self._fingerprint = fingerprint
        if self.active:
            self._on_snapshot(documents)
        return True

    def _poll_loop(self) -> None:
        delay = self._interval
        failing = False
        while not self._stop_event.is_set():
            try:
                self.poll_once()
                delay = self._interval
                if failing:
                    Log.info(f"FirestoreRestStore: '{self.collection}' listener recovered")
                failing = False
            except Exception as e:
                if not failing:
                    Log.warning(f"FirestoreRestStore: poll of '{self.collection}' failed: {e}")
                    if self._on_error is not None and self.active:
                        try:
                            self._on_error(e)
                        except Exception as handler_error:
                            Log.error(f"FirestoreRestStore: error handler raised: {handler_error}")
                failing = True
                delay = min(delay * 2, MAX_POLL_BACKOFF_SECONDS)
            self._stop_event.wait(delay)


class FirestoreRestStore(DocumentStore):
    """
    DocumentStore backed by Cloud Firestore.

    Args:
        project_id: Google Cloud project id
        database: Firestore database id
        api_key: Web API key, sent as the "key" query parameter
        id_token: Firebase ID token, sent as a Bearer token
        poll_interval_seconds: Listener polling period
        timeout: Per-request timeout in seconds
        client: Preconfigured httpx.Client (tests pass one with a MockTransport)
    """

    def __init__(
        self,
        project_id: str,
        database: str = "(default)",
        api_key: Optional[str] = None,
        id_token: Optional[str] = None,
        poll_interval_seconds: float = 1.0,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        if not project_id:
            raise ValueError("Firestore project id is required")

        self._database_path = f"projects/{project_id}/databases/{database}"
        self._documents_path = f"{self._database_path}/documents"
        self._api_key = api_key
        self._poll_interval = poll_interval_seconds
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)
        if id_token:
            self._client.headers["Authorization"] = f"Bearer {id_token}"
        self._listeners: List[_PollingListener] = []
        self._lock = threading.Lock()

        Log.info(f"FirestoreRestStore: Initialized for {self._database_path}")

    # =========================================================================
    # HTTP helpers
    # =========================================================================

    def _url(self, path: str) -> str:
        return f"{FIRESTORE_API_URL}/{path}"

    def _document_name(self, collection: str, document_id: str) -> str:
        return f"{self._documents_path}/{collection}/{document_id}"

    def _params(self, extra: Optional[List[Tuple[str, str]]] = None) -> List[Tuple[str, str]]:
        params = list(extra or [])
        if self._api_key:
            params.append(("key", self._api_key))
        return params

    def _request(self, method: str, url: str, collection: str = "", document_id: str = "",
                 params: Optional[List[Tuple[str, str]]] = None, json: Any = None) -> httpx.Response:
        try:
            response = self._client.request(method, url, params=self._params(params), json=json)
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"Firestore request failed: {e}", collection, document_id) from e

        if response.status_code == 404 or (
            response.status_code == 400 and "FAILED_PRECONDITION" in response.text
        ):
            if document_id:
                raise DocumentNotFoundError(collection, document_id)
        if response.is_error:
            raise RemoteStoreError(
                f"Firestore returned {response.status_code}: {_error_message(response)}",
                collection,
                document_id,
            )
        return response

    @staticmethod
    def _to_snapshot(document: Dict[str, Any]) -> DocumentSnapshot:
        return DocumentSnapshot(
            id=document["name"].rsplit("/", 1)[-1],
            data=decode_fields(document.get("fields", {})),
            update_time=decode_timestamp(document.get("updateTime")),
        )

    # =========================================================================
    # DocumentStore
    # =========================================================================

    def list(self, collection: str) -> List[DocumentSnapshot]:
        documents: List[DocumentSnapshot] = []
        page_token = None
        while True:
            params = [("pageSize", str(DEFAULT_PAGE_SIZE))]
            if page_token:
                params.append(("pageToken", page_token))
            response = self._request("GET", self._url(f"{self._documents_path}/{collection}"),
                                     collection=collection, params=params)
            body = response.json()
            for raw in body.get("documents", []):
                try:
                    documents.append(self._to_snapshot(raw))
                except FirestoreValueError as e:
                    Log.warning(f"FirestoreRestStore: skipping undecodable document {raw.get('name')}: {e}")
            page_token = body.get("nextPageToken")
            if not page_token:
                return documents

    def add(self, collection: str, data: Dict[str, Any], server_timestamp_fields: tuple = ("createdAt",)) -> str:
        document_id = auto_id()
        fields = {k: v for k, v in data.items() if k not in server_timestamp_fields}
        write = {
            "update": {
                "name": self._document_name(collection, document_id),
                "fields": encode_fields(fields),
            },
            "currentDocument": {"exists": False},
        }
        if server_timestamp_fields:
            write["updateTransforms"] = [
                {"fieldPath": name, "setToServerValue": "REQUEST_TIME"}
                for name in server_timestamp_fields
            ]
        self._request("POST", self._url(f"{self._documents_path}:commit"), collection=collection,
                      json={"writes": [write]})
        Log.debug(f"FirestoreRestStore: added {collection}/{document_id}")
        return document_id

    def set(self, collection: str, document_id: str, data: Dict[str, Any]) -> None:
        self._request("PATCH", self._url(self._document_name(collection, document_id)),
                      collection=collection, json={"fields": encode_fields(data)})

    def update(self, collection: str, document_id: str, fields: Dict[str, Any]) -> None:
        params = [("updateMask.fieldPaths", name) for name in fields]
        params.append(("currentDocument.exists", "true"))
        self._request("PATCH", self._url(self._document_name(collection, document_id)),
                      collection=collection, document_id=document_id,
                      params=params, json={"fields": encode_fields(fields)})

    def delete(self, collection: str, document_id: str) -> None:
        self._request("DELETE", self._url(self._document_name(collection, document_id)),
                      collection=collection, document_id=document_id,
                      params=[("currentDocument.exists", "true")])

    def listen(self, collection: str, on_snapshot: SnapshotCallback,
               on_error: Optional[ErrorCallback] = None) -> ListenerRegistration:
        listener = _PollingListener(self, collection, on_snapshot, on_error, self._poll_interval)
        with self._lock:
            self._listeners.append(listener)
        listener.start()
        Log.info(f"FirestoreRestStore: listening to '{collection}' every {self._poll_interval:.2f}s")
        return listener

    def _forget_listener(self, listener: _PollingListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def close(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener.remove()
        if self._owns_client:
            self._client.close()
        Log.info("FirestoreRestStore: Closed")


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("error", {}).get("message", response.text)
    except ValueError:
        return response.text
