"""
Domain layer for the timecode feature.

Pure conversions between HH:MM:SS:FF strings and seconds at 30 fps.
"""
from src.features.timecode.domain.timecode import (
    FRAME_RATE,
    FRAME_DURATION_MS,
    ZERO_TIMECODE,
    TimecodeFormatError,
    parse_timecode,
    is_valid_timecode,
    timecode_to_seconds,
    seconds_to_timecode,
    wall_clock_timecode,
)

__all__ = [
    'FRAME_RATE',
    'FRAME_DURATION_MS',
    'ZERO_TIMECODE',
    'TimecodeFormatError',
    'parse_timecode',
    'is_valid_timecode',
    'timecode_to_seconds',
    'seconds_to_timecode',
    'wall_clock_timecode',
]
