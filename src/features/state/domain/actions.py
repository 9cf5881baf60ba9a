"""
Store actions

The closed set of intents the reducer understands, plus factory functions
that build well-formed actions. Factories validate their payloads; the
reducer still tolerates malformed hand-built actions.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from src.features.timecode.domain.timecode import TimecodeFormatError, parse_timecode
from src.shared.domain.entities import (
    ActionCategory,
    Location,
    LogEntry,
    Participant,
    Tag,
    User,
)


class ActionType(Enum):
    SET_USER = "SET_USER"
    SET_PARTICIPANTS = "SET_PARTICIPANTS"
    SET_LOCATIONS = "SET_LOCATIONS"
    SET_ACTION_CATEGORIES = "SET_ACTION_CATEGORIES"
    SET_TAGS = "SET_TAGS"
    SET_LOG_ENTRIES = "SET_LOG_ENTRIES"
    SET_TIMECODE = "SET_TIMECODE"
    SET_MANUAL_TIMECODE = "SET_MANUAL_TIMECODE"
    SET_RECORDING = "SET_RECORDING"
    SET_SELECTED_PARTICIPANTS = "SET_SELECTED_PARTICIPANTS"
    SET_SELECTED_LOCATION = "SET_SELECTED_LOCATION"
    SET_SELECTED_ACTION = "SET_SELECTED_ACTION"
    SET_SELECTED_TAGS = "SET_SELECTED_TAGS"
    TOGGLE_DARK_MODE = "TOGGLE_DARK_MODE"


@dataclass(frozen=True)
class Action:
    type: Any
    payload: Any = None

    @property
    def name(self) -> str:
        return self.type.value if isinstance(self.type, ActionType) else str(self.type)


@dataclass(frozen=True)
class ManualTimecodePayload:
    """
    Payload of SET_MANUAL_TIMECODE.

    Attributes:
        is_manual: True to enter MANUAL, False to return to AUTO
        start_epoch: Anchor instant in epoch seconds (MANUAL only)
        base_timecode: Timecode at the anchor instant (MANUAL only)
    """
    is_manual: bool
    start_epoch: Optional[float] = None
    base_timecode: Optional[str] = None

    def is_well_formed(self) -> bool:
        if not self.is_manual:
            return True
        if not isinstance(self.start_epoch, (int, float)) or isinstance(self.start_epoch, bool):
            return False
        try:
            parse_timecode(self.base_timecode)
        except TimecodeFormatError:
            return False
        return True


def set_user(user: Optional[User]) -> Action:
    return Action(ActionType.SET_USER, user)


def set_participants(participants: Iterable[Participant]) -> Action:
    return Action(ActionType.SET_PARTICIPANTS, tuple(participants))


def set_locations(locations: Iterable[Location]) -> Action:
    return Action(ActionType.SET_LOCATIONS, tuple(locations))


def set_action_categories(categories: Iterable[ActionCategory]) -> Action:
    return Action(ActionType.SET_ACTION_CATEGORIES, tuple(categories))


def set_tags(tags: Iterable[Tag]) -> Action:
    return Action(ActionType.SET_TAGS, tuple(tags))


def set_log_entries(entries: Iterable[LogEntry]) -> Action:
    return Action(ActionType.SET_LOG_ENTRIES, tuple(entries))


def set_timecode(timecode: str) -> Action:
    return Action(ActionType.SET_TIMECODE, timecode)


def set_manual_timecode(
    is_manual: bool,
    start_epoch: Optional[float] = None,
    base_timecode: Optional[str] = None,
) -> Action:
    """
    Build a SET_MANUAL_TIMECODE action.

    Entering MANUAL requires both a numeric anchor and a well-formed base
    timecode. Returning to AUTO discards whatever was passed.

    Raises:
        TimecodeFormatError: If is_manual and the base timecode is malformed
        ValueError: If is_manual and the anchor is missing
    """
    if not is_manual:
        return Action(ActionType.SET_MANUAL_TIMECODE, ManualTimecodePayload(is_manual=False))

    if base_timecode is None:
        raise TimecodeFormatError(base_timecode, "manual mode requires a base timecode")
    parse_timecode(base_timecode)
    if not isinstance(start_epoch, (int, float)) or isinstance(start_epoch, bool):
        raise ValueError("manual mode requires a numeric anchor epoch")

    return Action(
        ActionType.SET_MANUAL_TIMECODE,
        ManualTimecodePayload(is_manual=True, start_epoch=float(start_epoch), base_timecode=base_timecode),
    )


def set_recording(is_recording: bool) -> Action:
    return Action(ActionType.SET_RECORDING, bool(is_recording))


def set_selected_participants(participant_ids: Iterable[str]) -> Action:
    return Action(ActionType.SET_SELECTED_PARTICIPANTS, tuple(participant_ids))


def set_selected_location(location_id: str) -> Action:
    return Action(ActionType.SET_SELECTED_LOCATION, location_id)


def set_selected_action(action_category_id: str) -> Action:
    return Action(ActionType.SET_SELECTED_ACTION, action_category_id)


def set_selected_tags(tag_ids: Iterable[str]) -> Action:
    return Action(ActionType.SET_SELECTED_TAGS, tuple(tag_ids))


def toggle_dark_mode() -> Action:
    return Action(ActionType.TOGGLE_DARK_MODE)
