"""
Application state

AppState is the single immutable aggregate owned by the Store. Each field is
a slice that exactly one action replaces; a reduction produces a new AppState
via dataclasses.replace and never mutates the old one.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from src.features.timecode.domain.timecode import ZERO_TIMECODE
from src.shared.domain.entities import (
    ActionCategory,
    Location,
    LogEntry,
    Participant,
    Tag,
    User,
)


class TimecodeMode(Enum):
    """How the clock derives the current timecode."""
    AUTO = "AUTO"
    MANUAL = "MANUAL"


@dataclass(frozen=True)
class TimecodeModeState:
    """
    The timecode_mode slice.

    In MANUAL both anchor_epoch (epoch seconds at which the run began) and
    base_timecode (timecode at that instant) are set; in AUTO both are None.
    """
    mode: TimecodeMode = TimecodeMode.AUTO
    anchor_epoch: Optional[float] = None
    base_timecode: Optional[str] = None

    @property
    def is_manual(self) -> bool:
        return self.mode == TimecodeMode.MANUAL


@dataclass(frozen=True)
class AppState:
    current_user: Optional[User] = None

    # Remote collections, replaced wholesale on every snapshot
    participants: Tuple[Participant, ...] = ()
    locations: Tuple[Location, ...] = ()
    action_categories: Tuple[ActionCategory, ...] = ()
    tags: Tuple[Tag, ...] = ()
    log_entries: Tuple[LogEntry, ...] = ()

    # Clock
    current_timecode: str = ZERO_TIMECODE
    timecode_mode: TimecodeModeState = field(default_factory=TimecodeModeState)
    is_recording: bool = False

    dark_mode: bool = False

    # Selection scratch space, never persisted
    selected_participants: Tuple[str, ...] = ()
    selected_location: str = ""
    selected_action: str = ""
    selected_tags: Tuple[str, ...] = ()
