"""
Infrastructure layer for the sync feature.

DocumentStore implementations:
- InMemoryDocumentStore - process-local store
- FirestoreRestStore - Cloud Firestore over REST (httpx)
"""
from src.features.sync.infrastructure.memory_document_store import InMemoryDocumentStore
from src.features.sync.infrastructure.firestore_rest_store import FirestoreRestStore

__all__ = [
    'InMemoryDocumentStore',
    'FirestoreRestStore',
]
