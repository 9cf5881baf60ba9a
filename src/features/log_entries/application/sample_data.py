"""
Sample reference data for an empty remote store.

Writes a fixed cast, set of locations, action categories and tags under
stable ids (p1..p4, l1..l4, a1..a5, t1..t5). Seeding twice overwrites the
same documents instead of duplicating them.
"""
from datetime import datetime, timezone
from typing import Callable, Dict, List, Tuple

from src.features.sync.application.sync_adapter import ACTION_CATEGORIES, LOCATIONS, PARTICIPANTS, TAGS
from src.features.sync.domain.document_store import DocumentStore
from src.shared.domain.entities import ActionCategory, Location, Participant, Tag
from src.utils.message import Log


SAMPLE_PARTICIPANTS: Tuple[Participant, ...] = (
    Participant("p1", "Wagner Baiano", bio="Fitness enthusiast and team leader"),
    Participant("p2", "André Amado", bio="Artist and creative strategist"),
    Participant("p3", "Daiane Santos", bio="Chef and food innovator"),
    Participant("p4", "Reinaldo Alves", bio="Adventure seeker and motivator"),
)

SAMPLE_LOCATIONS: Tuple[Location, ...] = (
    Location("l1", "Sala", description="Central hub for daily activities", color="#3B82F6"),
    Location("l2", "Cozinha", description="Cooking and meal prep area", color="#EF4444"),
    Location("l3", "Academia", description="Outdoor activities and challenges", color="#10B981"),
    Location("l4", "Piscina", description="Private interview space", color="#8B5CF6"),
)

SAMPLE_ACTION_CATEGORIES: Tuple[ActionCategory, ...] = (
    ActionCategory("a1", "Falando de...", description="Competition or task-based activities", color="#F59E0B"),
    ActionCategory("a2", "Conflito", description="Disagreements or tensions", color="#DC2626"),
    ActionCategory("a3", "Alianças", description="Strategic partnerships", color="#059669"),
    ActionCategory("a4", "Briga", description="Private thoughts and strategies", color="#7C3AED"),
    ActionCategory("a5", "Casal", description="Casual interactions and bonding", color="#2563EB"),
)

SAMPLE_TAGS: Tuple[Tag, ...] = (
    Tag("t1", "Drama", color="#DC2626"),
    Tag("t2", "Take - Zoom In", color="#059669"),
    Tag("t3", "Take Zoom Out", color="#7C3AED"),
    Tag("t4", "Dançando", color="#F59E0B"),
    Tag("t5", "Importante", color="#DC2626"),
)


def seed_reference_data(
    document_store: DocumentStore,
    clock: Callable[[], datetime] = None,
) -> Dict[str, int]:
    """
    Write the sample reference records.

    Args:
        document_store: Store to write into
        clock: Returns the createdAt value stamped on every record

    Returns:
        Number of documents written per collection
    """
    now = (clock or (lambda: datetime.now(timezone.utc)))()
    groups: List[Tuple[str, tuple]] = [
        (PARTICIPANTS, SAMPLE_PARTICIPANTS),
        (LOCATIONS, SAMPLE_LOCATIONS),
        (ACTION_CATEGORIES, SAMPLE_ACTION_CATEGORIES),
        (TAGS, SAMPLE_TAGS),
    ]

    written: Dict[str, int] = {}
    for collection, records in groups:
        for record in records:
            document = record.to_document()
            document["createdAt"] = now
            document_store.set(collection, record.id, document)
        written[collection] = len(records)

    Log.info(f"SampleData: Seeded {sum(written.values())} reference documents")
    return written
