"""
Application layer for the timecode feature.
"""
from src.features.timecode.application.clock_engine import ClockEngine, DEFAULT_TICK_INTERVAL_MS

__all__ = [
    'ClockEngine',
    'DEFAULT_TICK_INTERVAL_MS',
]
