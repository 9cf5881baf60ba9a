"""
State selectors

Read-side helpers for a front end: resolving referenced ids to display
names and filtering the activity feed. Dangling references resolve to
"Unknown"; entries that reference nothing resolve to "None".
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Iterable, List, Optional, Sequence, Union

from src.features.state.domain.app_state import AppState
from src.shared.domain.entities import LogEntry


UNKNOWN = "Unknown"
NONE = "None"

DateBound = Union[date, datetime]


def resolve_name(records: Iterable, record_id: str) -> str:
    """Name of the record with record_id, or "Unknown" when absent."""
    for record in records:
        if record.id == record_id:
            return record.name
    return UNKNOWN


def participant_names(state: AppState, entry: LogEntry) -> List[str]:
    return sorted(resolve_name(state.participants, pid) for pid in entry.participants)


def tag_names(state: AppState, entry: LogEntry) -> List[str]:
    return sorted(resolve_name(state.tags, tid) for tid in entry.tags)


def location_name(state: AppState, entry: LogEntry) -> str:
    return resolve_name(state.locations, entry.location)


def action_category_name(state: AppState, entry: LogEntry) -> str:
    return resolve_name(state.action_categories, entry.action_category)


def describe_entry(state: AppState, entry: LogEntry) -> dict:
    """Flatten an entry into display strings."""
    return {
        "id": entry.id,
        "timecode": entry.timecode,
        "timestamp": entry.timestamp.isoformat() if entry.timestamp else "",
        "participants": ", ".join(participant_names(state, entry)) or NONE,
        "location": location_name(state, entry),
        "action": action_category_name(state, entry),
        "tags": ", ".join(tag_names(state, entry)) or NONE,
        "notes": entry.notes,
    }


@dataclass(frozen=True)
class LogEntryFilter:
    """
    Activity feed filter.

    Attributes:
        search_text: Case-insensitive match against notes or any participant name
        participant_id: Keep entries that include this participant
        location_id: Keep entries at this location
        start: Earliest timestamp (a bare date means start of that day, UTC)
        end: Latest timestamp (a bare date means end of that day, UTC)
    """
    search_text: str = ""
    participant_id: str = ""
    location_id: str = ""
    start: Optional[DateBound] = None
    end: Optional[DateBound] = None


def _as_bound(value: DateBound, end_of_day: bool) -> datetime:
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.max if end_of_day else time.min)
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _sort_key(entry: LogEntry) -> datetime:
    return entry.timestamp or datetime.min.replace(tzinfo=timezone.utc)


def sort_newest_first(entries: Iterable[LogEntry]) -> List[LogEntry]:
    """Entries ordered by timestamp, newest first; undated entries last."""
    return sorted(entries, key=_sort_key, reverse=True)


def filter_log_entries(state: AppState, criteria: Optional[LogEntryFilter] = None) -> List[LogEntry]:
    """
    Apply the activity feed filter to state.log_entries.

    Returns:
        Matching entries, newest first.
    """
    criteria = criteria or LogEntryFilter()
    needle = criteria.search_text.strip().lower()
    start = _as_bound(criteria.start, end_of_day=False) if criteria.start else None
    end = _as_bound(criteria.end, end_of_day=True) if criteria.end else None

    matches: List[LogEntry] = []
    for entry in state.log_entries:
        if needle:
            names = [p.name.lower() for p in state.participants if p.id in entry.participants]
            if needle not in entry.notes.lower() and not any(needle in name for name in names):
                continue
        if criteria.participant_id and criteria.participant_id not in entry.participants:
            continue
        if criteria.location_id and entry.location != criteria.location_id:
            continue
        if start or end:
            if entry.timestamp is None:
                continue
            if start and entry.timestamp < start:
                continue
            if end and entry.timestamp > end:
                continue
        matches.append(entry)

    return sort_newest_first(matches)


def entry_ids(entries: Sequence[LogEntry]) -> List[str]:
    return [entry.id for entry in entries]
