"""
Unit tests for record decoding from remote documents.
"""
from datetime import datetime, timezone

import pytest

from src.shared.domain.entities import (
    DocumentDecodeError,
    Location,
    LogEntry,
    NewLogEntry,
    Participant,
    Tag,
    decode_timestamp,
)


UTC = timezone.utc


class TestDecodeTimestamp:
    """decode_timestamp accepts every timestamp shape the stores produce."""

    def test_datetime_passthrough_gets_utc(self):
        assert decode_timestamp(datetime(2024, 1, 1, 12, 0)) == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def test_iso_string_with_z(self):
        assert decode_timestamp("2024-01-01T12:00:00Z") == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def test_nanosecond_fraction_is_trimmed(self):
        value = decode_timestamp("2024-01-01T12:00:00.123456789Z")
        assert value == datetime(2024, 1, 1, 12, 0, 0, 123456, tzinfo=UTC)

    def test_short_fraction(self):
        assert decode_timestamp("2024-01-01T12:00:00.5Z").microsecond == 500000

    def test_epoch_milliseconds(self):
        assert decode_timestamp(1_000) == datetime(1970, 1, 1, 0, 0, 1, tzinfo=UTC)

    def test_seconds_mapping(self):
        assert decode_timestamp({"seconds": 60, "nanos": 0}) == datetime(1970, 1, 1, 0, 1, tzinfo=UTC)
        assert decode_timestamp({"_seconds": 60}) == datetime(1970, 1, 1, 0, 1, tzinfo=UTC)

    @pytest.mark.parametrize("value", [None, True, "yesterday", {"foo": 1}, object()])
    def test_unrecognised_values_yield_none(self, value):
        assert decode_timestamp(value) is None


class TestReferenceRecords:
    """Participants, locations, action categories and tags."""

    def test_participant_from_document(self):
        participant = Participant.from_document("p1", {
            "name": "Ana", "bio": "Chef", "isActive": False, "createdAt": "2024-01-01T00:00:00Z",
        })
        assert participant == Participant(
            "p1", "Ana", bio="Chef", is_active=False,
            created_at=datetime(2024, 1, 1, tzinfo=UTC),
        )

    def test_optional_fields_default(self):
        assert Location.from_document("l1", {"name": "Sala"}) == Location("l1", "Sala")

    def test_name_is_required(self):
        with pytest.raises(DocumentDecodeError) as exc_info:
            Tag.from_document("t1", {"color": "#fff"})
        assert exc_info.value.document_id == "t1"

    def test_wrong_field_type(self):
        with pytest.raises(DocumentDecodeError):
            Participant.from_document("p1", {"name": "Ana", "isActive": "yes"})

    def test_to_document_uses_camel_case(self):
        assert Participant("p1", "Ana").to_document() == {
            "name": "Ana", "bio": "", "isActive": True, "color": "",
        }


class TestLogEntryRecords:
    """Log entries and new-entry drafts."""

    def test_from_document(self):
        entry = LogEntry.from_document("e1", {
            "timestamp": "2024-01-01T10:00:00Z",
            "timecode": "10:00:00:00",
            "participants": ["p2", "p1", "p1"],
            "location": "l1",
            "actionCategory": "a1",
            "tags": ["t1"],
            "notes": "hello",
            "createdBy": "u1",
        })
        assert entry.participants == frozenset({"p1", "p2"})
        assert entry.action_category == "a1"
        assert entry.created_by == "u1"
        assert entry.timestamp == datetime(2024, 1, 1, 10, tzinfo=UTC)

    def test_missing_fields_default(self):
        entry = LogEntry.from_document("e1", {})
        assert entry.participants == frozenset()
        assert entry.notes == ""

    def test_participants_must_be_ids(self):
        with pytest.raises(DocumentDecodeError):
            LogEntry.from_document("e1", {"participants": "p1"})
        with pytest.raises(DocumentDecodeError):
            LogEntry.from_document("e1", {"tags": [1, 2]})

    def test_new_entry_document(self):
        now = datetime(2024, 1, 1, tzinfo=UTC)
        draft = NewLogEntry("01:00:00:00", participants=["p2", "p1"], notes="n")
        document = draft.to_document(created_by="u1", now=now)
        assert document["participants"] == ["p1", "p2"]
        assert document["timestamp"] == now
        assert document["createdBy"] == "u1"
        assert "createdAt" not in document
        assert "id" not in document
