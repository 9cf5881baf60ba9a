"""
Remote document store contract

The boundary to the multi-writer remote store. Implementations deliver live
snapshots to listeners (on any thread) and perform single-document writes.
Every snapshot carries the full current membership of one collection.
"""
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional


# =============================================================================
# Custom Exceptions
# =============================================================================

class RemoteStoreError(Exception):
    """Base exception for remote store operations."""

    def __init__(self, message: str, collection: str = "", document_id: str = ""):
        self.collection = collection
        self.document_id = document_id
        super().__init__(message)


class DocumentNotFoundError(RemoteStoreError):
    """Raised when an update or delete targets a document that does not exist."""

    def __init__(self, collection: str, document_id: str):
        super().__init__(
            f"Document '{document_id}' not found in '{collection}'",
            collection=collection,
            document_id=document_id,
        )


# =============================================================================
# Snapshot Types
# =============================================================================

@dataclass(frozen=True)
class DocumentSnapshot:
    """One document as read from the store."""
    id: str
    data: Dict[str, Any] = field(default_factory=dict)
    update_time: Optional[datetime] = None


SnapshotCallback = Callable[[List[DocumentSnapshot]], None]
ErrorCallback = Callable[[Exception], None]


class ListenerRegistration(ABC):
    """Handle returned by DocumentStore.listen()."""

    @abstractmethod
    def remove(self) -> None:
        """Stop delivering snapshots. Idempotent."""
        pass

    @property
    @abstractmethod
    def active(self) -> bool:
        pass


class DocumentStore(ABC):
    """
    Abstract remote document store.

    Writes block the calling thread until the store acknowledges them.
    """

    @abstractmethod
    def listen(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> ListenerRegistration:
        """
        Subscribe to a collection.

        on_snapshot receives the full document list once initially and again
        after every change. Delivery may happen on a background thread.
        """
        pass

    @abstractmethod
    def add(self, collection: str, data: Dict[str, Any], server_timestamp_fields: tuple = ("createdAt",)) -> str:
        """
        Create a document with a store-assigned id.

        Fields named in server_timestamp_fields are set to the store's
        commit time.

        Returns:
            The new document id
        """
        pass

    @abstractmethod
    def set(self, collection: str, document_id: str, data: Dict[str, Any]) -> None:
        """Create or overwrite a document with a caller-chosen id."""
        pass

    @abstractmethod
    def update(self, collection: str, document_id: str, fields: Dict[str, Any]) -> None:
        """
        Merge fields into an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        pass

    @abstractmethod
    def delete(self, collection: str, document_id: str) -> None:
        """
        Delete an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        pass

    @abstractmethod
    def list(self, collection: str) -> List[DocumentSnapshot]:
        """Read the current membership of a collection."""
        pass

    def close(self) -> None:
        """Release connections and stop any listeners."""
        pass


AUTO_ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
AUTO_ID_LENGTH = 20


def auto_id() -> str:
    """20-character random document id in the remote store's style."""
    return "".join(secrets.choice(AUTO_ID_ALPHABET) for _ in range(AUTO_ID_LENGTH))
