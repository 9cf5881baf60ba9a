"""
Domain layer for the sync feature.

Contains the DocumentStore contract, snapshot types and remote store errors.
"""
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

__all__ = [
    'DocumentNotFoundError',
    'DocumentSnapshot',
    'DocumentStore',
    'ErrorCallback',
    'ListenerRegistration',
    'RemoteStoreError',
    'SnapshotCallback',
    'auto_id',
]
