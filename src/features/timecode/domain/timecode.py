"""
Timecode conversions

Timecodes are "HH:MM:SS:FF" strings at a fixed 30 frames per second.
Conversions truncate to whole frames, so a round trip is exact only at
frame granularity.
"""
import math
import re
from datetime import datetime
from typing import Optional, Tuple


FRAME_RATE = 30
# Wall-clock frame quantum in milliseconds
FRAME_DURATION_MS = 33.33
ZERO_TIMECODE = "00:00:00:00"

_TIMECODE_PATTERN = re.compile(r"^(\d{2}):(\d{2}):(\d{2}):(\d{2})$")
# Absorbs float error so "00:00:00:29" -> 0.9666... -> frame 29, not 28
_FRAME_EPSILON = 1e-6


class TimecodeFormatError(ValueError):
    """Raised when a string is not a well-formed HH:MM:SS:FF timecode."""

    def __init__(self, value, reason: str = "expected HH:MM:SS:FF"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid timecode {value!r}: {reason}")


def parse_timecode(value: str) -> Tuple[int, int, int, int]:
    """
    Split a timecode into its four fields.

    Args:
        value: Timecode string, four zero-padded two-digit fields

    Returns:
        (hours, minutes, seconds, frames)

    Raises:
        TimecodeFormatError: If the string is malformed or a field is out of range
    """
    if not isinstance(value, str):
        raise TimecodeFormatError(value, "not a string")

    match = _TIMECODE_PATTERN.match(value)
    if match is None:
        raise TimecodeFormatError(value)

    hours, minutes, seconds, frames = (int(part) for part in match.groups())
    if minutes >= 60:
        raise TimecodeFormatError(value, "minutes must be below 60")
    if seconds >= 60:
        raise TimecodeFormatError(value, "seconds must be below 60")
    if frames >= FRAME_RATE:
        raise TimecodeFormatError(value, f"frames must be below {FRAME_RATE}")
    return hours, minutes, seconds, frames


def is_valid_timecode(value) -> bool:
    try:
        parse_timecode(value)
    except TimecodeFormatError:
        return False
    return True


def timecode_to_seconds(value: str) -> float:
    """
    Convert a timecode to seconds: H*3600 + M*60 + S + F/30.

    Raises:
        TimecodeFormatError: If the timecode is malformed
    """
    hours, minutes, seconds, frames = parse_timecode(value)
    return hours * 3600 + minutes * 60 + seconds + frames / FRAME_RATE


def seconds_to_timecode(total_seconds: float) -> str:
    """
    Convert seconds to a timecode, truncating to the containing frame.

    Negative input clamps to "00:00:00:00". Hours are not wrapped at 24.

    Args:
        total_seconds: Time in seconds

    Returns:
        Zero-padded "HH:MM:SS:FF"
    """
    if total_seconds is None or math.isnan(total_seconds) or total_seconds <= 0:
        return ZERO_TIMECODE

    total_frames = math.floor(total_seconds * FRAME_RATE + _FRAME_EPSILON)
    whole_seconds, frames = divmod(total_frames, FRAME_RATE)
    hours, remainder = divmod(whole_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}:{frames:02d}"


def wall_clock_timecode(moment: Optional[datetime] = None) -> str:
    """
    Local time of day as a timecode.

    The frame is floor(milliseconds within the current second / 33.33).

    Args:
        moment: Local time to format; defaults to now
    """
    moment = moment or datetime.now()
    milliseconds = moment.microsecond // 1000
    frames = min(int(milliseconds // FRAME_DURATION_MS), FRAME_RATE - 1)
    return f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}:{frames:02d}"
