"""
Sync feature module.

Handles:
- The DocumentStore boundary to the remote real-time store (domain)
- RemoteSyncAdapter mirroring five collections into the Store (application)
- In-memory and Cloud Firestore store implementations (infrastructure)

Usage:
    from src.features.sync.application import RemoteSyncAdapter
    from src.features.sync.infrastructure import InMemoryDocumentStore

    adapter = RemoteSyncAdapter(InMemoryDocumentStore(), store)
    adapter.start()
"""
