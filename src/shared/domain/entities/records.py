"""
Production logging records

Immutable projections of remote documents. Each record decodes from a
(document id, field dict) pair and encodes back to the camelCase field names
used on the wire. Records are replaced wholesale on every snapshot, never
edited in place.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Optional


_FRACTION = re.compile(r"\.(\d+)")


class DocumentDecodeError(ValueError):
    """Raised when a remote document cannot be turned into a record."""

    def __init__(self, record_type: str, document_id: str, reason: str):
        self.record_type = record_type
        self.document_id = document_id
        self.reason = reason
        super().__init__(f"Cannot decode {record_type} '{document_id}': {reason}")


def decode_timestamp(value: Any) -> Optional[datetime]:
    """
    Best-effort conversion of a stored timestamp to an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings, epoch milliseconds, mappings with
    seconds/nanos (or _seconds/_nanoseconds), and objects exposing
    to_datetime() or seconds/nanos attributes. Anything else yields None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # Nanosecond precision is trimmed to microseconds
        text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, dict):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanos", value.get("nanoseconds", value.get("_nanoseconds", 0)))
    elif hasattr(value, "to_datetime"):
        return decode_timestamp(value.to_datetime())
    else:
        seconds = getattr(value, "seconds", None)
        nanos = getattr(value, "nanos", 0)

    if not isinstance(seconds, (int, float)) or isinstance(seconds, bool):
        return None
    try:
        return datetime.fromtimestamp(seconds + (nanos or 0) / 1e9, tz=timezone.utc)
    except (OverflowError, OSError, ValueError, TypeError):
        return None


def _string(record_type: str, document_id: str, data: Dict[str, Any], key: str, default: str = "") -> str:
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, str):
        raise DocumentDecodeError(record_type, document_id, f"field '{key}' must be a string")
    return value


def _id_set(record_type: str, document_id: str, data: Dict[str, Any], key: str) -> FrozenSet[str]:
    value = data.get(key)
    if value is None:
        return frozenset()
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise DocumentDecodeError(record_type, document_id, f"field '{key}' must be a list of ids")
    items = list(value)
    if not all(isinstance(item, str) for item in items):
        raise DocumentDecodeError(record_type, document_id, f"field '{key}' must contain only string ids")
    return frozenset(items)


def _require_name(record_type: str, document_id: str, data: Dict[str, Any]) -> str:
    name = data.get("name")
    if not isinstance(name, str):
        raise DocumentDecodeError(record_type, document_id, "field 'name' is required")
    return name


@dataclass(frozen=True)
class User:
    """The signed-in operator."""
    uid: str
    email: str = ""
    display_name: str = ""


@dataclass(frozen=True)
class Participant:
    id: str
    name: str
    bio: str = ""
    is_active: bool = True
    color: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document_id: str, data: Dict[str, Any]) -> 'Participant':
        is_active = data.get("isActive", True)
        if not isinstance(is_active, bool):
            raise DocumentDecodeError("Participant", document_id, "field 'isActive' must be a boolean")
        return cls(
            id=document_id,
            name=_require_name("Participant", document_id, data),
            bio=_string("Participant", document_id, data, "bio"),
            is_active=is_active,
            color=_string("Participant", document_id, data, "color"),
            created_at=decode_timestamp(data.get("createdAt")),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "bio": self.bio,
            "isActive": self.is_active,
            "color": self.color,
        }


@dataclass(frozen=True)
class Location:
    id: str
    name: str
    description: str = ""
    color: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document_id: str, data: Dict[str, Any]) -> 'Location':
        return cls(
            id=document_id,
            name=_require_name("Location", document_id, data),
            description=_string("Location", document_id, data, "description"),
            color=_string("Location", document_id, data, "color"),
            created_at=decode_timestamp(data.get("createdAt")),
        )

    def to_document(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "color": self.color}


@dataclass(frozen=True)
class ActionCategory:
    id: str
    name: str
    description: str = ""
    color: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document_id: str, data: Dict[str, Any]) -> 'ActionCategory':
        return cls(
            id=document_id,
            name=_require_name("ActionCategory", document_id, data),
            description=_string("ActionCategory", document_id, data, "description"),
            color=_string("ActionCategory", document_id, data, "color"),
            created_at=decode_timestamp(data.get("createdAt")),
        )

    def to_document(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "color": self.color}


@dataclass(frozen=True)
class Tag:
    id: str
    name: str
    color: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document_id: str, data: Dict[str, Any]) -> 'Tag':
        return cls(
            id=document_id,
            name=_require_name("Tag", document_id, data),
            color=_string("Tag", document_id, data, "color"),
            created_at=decode_timestamp(data.get("createdAt")),
        )

    def to_document(self) -> Dict[str, Any]:
        return {"name": self.name, "color": self.color}


@dataclass(frozen=True)
class LogEntry:
    """
    One logged production event.

    participants and tags are sets: order is irrelevant and duplicates
    collapse. Referenced ids are not checked against the reference
    collections; readers resolve dangling ids as "Unknown".
    """
    id: str
    timestamp: Optional[datetime] = None
    timecode: str = ""
    participants: FrozenSet[str] = field(default_factory=frozenset)
    location: str = ""
    action_category: str = ""
    tags: FrozenSet[str] = field(default_factory=frozenset)
    notes: str = ""
    created_by: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document_id: str, data: Dict[str, Any]) -> 'LogEntry':
        return cls(
            id=document_id,
            timestamp=decode_timestamp(data.get("timestamp")),
            timecode=_string("LogEntry", document_id, data, "timecode"),
            participants=_id_set("LogEntry", document_id, data, "participants"),
            location=_string("LogEntry", document_id, data, "location"),
            action_category=_string("LogEntry", document_id, data, "actionCategory"),
            tags=_id_set("LogEntry", document_id, data, "tags"),
            notes=_string("LogEntry", document_id, data, "notes"),
            created_by=_string("LogEntry", document_id, data, "createdBy"),
            created_at=decode_timestamp(data.get("createdAt")),
        )


@dataclass(frozen=True)
class NewLogEntry:
    """
    Caller-supplied fields for a log entry that does not exist yet.

    id, createdAt and createdBy are filled in on write.
    """
    timecode: str
    participants: FrozenSet[str] = field(default_factory=frozenset)
    location: str = ""
    action_category: str = ""
    tags: FrozenSet[str] = field(default_factory=frozenset)
    notes: str = ""
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "participants", frozenset(self.participants))
        object.__setattr__(self, "tags", frozenset(self.tags))

    def to_document(self, created_by: str, now: datetime) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp or now,
            "timecode": self.timecode,
            "participants": sorted(self.participants),
            "location": self.location,
            "actionCategory": self.action_category,
            "tags": sorted(self.tags),
            "notes": self.notes,
            "createdBy": created_by,
        }
